import io
import logging

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from noteally.ai.errors import UnreadablePdf, InsufficientText

log = logging.getLogger(__name__)

# en dessous: PDF scanné / image sans couche texte
MIN_TEXT_CHARS = 50
PAGE_SEPARATOR = "\n"


def extract_text(data: bytes, min_chars: int = MIN_TEXT_CHARS) -> str:
    """Texte brut de toutes les pages, dans l'ordre, séparées par PAGE_SEPARATOR.

    Lève UnreadablePdf si le buffer n'est pas un PDF exploitable,
    InsufficientText si moins de `min_chars` caractères sont extraits.
    Pas d'OCR.

    Le seuil porte sur le texte sans les blancs de début et de fin: un PDF
    dont les pages ne rendent que des sauts de ligne est refusé, même si
    sa longueur brute (séparateurs compris) dépasse `min_chars`.
    """
    if not data:
        raise UnreadablePdf("Empty file.")

    try:
        reader = PdfReader(io.BytesIO(data))
        if reader.is_encrypted and not reader.decrypt(""):
            raise UnreadablePdf("This PDF is password protected.")
        pages = [page.extract_text() or "" for page in reader.pages]
    except (PyPdfError, ValueError) as e:
        raise UnreadablePdf(details={"reason": str(e)}) from e

    text = PAGE_SEPARATOR.join(pages)
    chars = len(text.strip())
    log.debug("pdf_extracted", extra={"pages": len(pages), "chars": chars})
    if chars < min_chars:
        raise InsufficientText(details={"chars": chars, "min_chars": min_chars})
    return text
