# tests/test_pdf.py
import pytest

from noteally.ai.errors import UnreadablePdf, InsufficientText
from noteally.ai.pdf import extract_text, PAGE_SEPARATOR


def test_extracts_text_in_page_order(text_pdf):
    first = "Chapter one covers thermodynamics and the first law of energy conservation."
    second = "Chapter two covers entropy and the second law in closed systems."
    text = extract_text(text_pdf([first, second]))

    assert first in text and second in text
    assert text.index(first) < text.index(second)
    assert PAGE_SEPARATOR in text


def test_blank_pdf_has_insufficient_text(blank_pdf):
    with pytest.raises(InsufficientText) as exc:
        extract_text(blank_pdf)
    assert exc.value.status_code == 422
    assert exc.value.details["chars"] == 0


def test_short_text_below_threshold(text_pdf):
    with pytest.raises(InsufficientText):
        extract_text(text_pdf(["Too short."]))


def test_whitespace_only_pages_are_insufficient(text_pdf):
    # 60 pages vides: le texte brut (séparateurs) dépasse 50 caractères
    with pytest.raises(InsufficientText) as exc:
        extract_text(text_pdf([" "] * 60))
    assert exc.value.details["chars"] == 0


def test_threshold_is_configurable(text_pdf):
    assert extract_text(text_pdf(["Too short."]), min_chars=5).strip() == "Too short."


@pytest.mark.parametrize("data", [b"", b"this is not a pdf at all"])
def test_unreadable_buffers(data):
    with pytest.raises(UnreadablePdf) as exc:
        extract_text(data)
    assert exc.value.code == "unreadable_pdf"
