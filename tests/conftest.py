# tests/conftest.py
import io, os, sys
from urllib.parse import unquote
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("JWT_ACCESS_MINUTES", "15")
os.environ.setdefault("JWT_REFRESH_DAYS", "7")

from pypdf import PdfWriter

from noteally import create_app
from noteally.extensions import db
from noteally.ai.errors import DownloadFailed, GenerationFailed

PUBLIC_BASE = "http://testserver"
LOREM = ("Lorem ipsum dolor sit amet consectetur adipiscing elit sed do eiusmod "
         "tempor incididunt ut labore et dolore magna aliqua Ut enim ad minim veniam ")


class StubClient:
    """Remplace Gemini: rend des réponses fixes et garde les prompts reçus."""

    def __init__(self, responses=("- point A\n- point B", "1. Q?\n2. Q?")):
        self.responses = list(responses)
        self.prompts = []
        self.fail_on_call = None  # numéro d'appel (1-based) qui échoue

    @property
    def calls(self):
        return len(self.prompts)

    def generate(self, prompt):
        self.prompts.append(prompt)
        if self.fail_on_call == self.calls:
            raise GenerationFailed(details={"reason": "stub failure"})
        return self.responses[(self.calls - 1) % len(self.responses)]


class StubFetcher:
    """Sert les URLs enregistrées, puis les fichiers du stockage local."""

    def __init__(self, storage_dir):
        self.storage_dir = storage_dir
        self.urls = {}
        self.calls = []

    def __call__(self, url):
        self.calls.append(url)
        if url in self.urls:
            return self.urls[url]
        prefix = f"{PUBLIC_BASE}/files/"
        if url.startswith(prefix):
            path = os.path.join(self.storage_dir, unquote(url[len(prefix):]))
            if os.path.exists(path):
                with open(path, "rb") as fh:
                    return fh.read()
        raise DownloadFailed(details={"status": 404})


def _pdf_escape(s):
    return s.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def build_text_pdf(pages):
    """PDF minimal (Helvetica, une ligne de texte par page), xref exacte."""
    n = len(pages)
    objects = []
    kids = " ".join(f"{4 + 2 * i} 0 R" for i in range(n))
    objects.append("<< /Type /Catalog /Pages 2 0 R >>")
    objects.append(f"<< /Type /Pages /Kids [{kids}] /Count {n} >>")
    objects.append("<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>")
    for i, text in enumerate(pages):
        stream = f"BT /F1 10 Tf 20 750 Td ({_pdf_escape(text)}) Tj ET"
        objects.append(
            f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            f"/Resources << /Font << /F1 3 0 R >> >> /Contents {5 + 2 * i} 0 R >>"
        )
        objects.append(f"<< /Length {len(stream.encode('latin-1'))} >>\nstream\n{stream}\nendstream")

    out = io.BytesIO()
    out.write(b"%PDF-1.4\n")
    offsets = []
    for num, body in enumerate(objects, start=1):
        offsets.append(out.tell())
        out.write(f"{num} 0 obj\n{body}\nendobj\n".encode("latin-1"))
    xref_at = out.tell()
    out.write(f"xref\n0 {len(objects) + 1}\n".encode())
    out.write(b"0000000000 65535 f \n")
    for off in offsets:
        out.write(f"{off:010d} 00000 n \n".encode())
    out.write(f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\nstartxref\n{xref_at}\n%%EOF\n".encode())
    return out.getvalue()


def build_blank_pdf(pages=1):
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=612, height=792)
    buf = io.BytesIO()
    writer.write(buf)
    return buf.getvalue()


@pytest.fixture()
def lorem_200():
    return (LOREM * 3)[:200]


@pytest.fixture()
def text_pdf():
    return build_text_pdf


@pytest.fixture()
def blank_pdf():
    return build_blank_pdf()


@pytest.fixture()
def app(tmp_path):
    storage_dir = str(tmp_path / "uploads")
    app = create_app({
        "TESTING": True,
        "STORAGE_BACKEND": "local",
        "STORAGE_LOCAL_DIR": storage_dir,
        "STORAGE_PUBLIC_BASE_URL": PUBLIC_BASE,
        "SUMMARY_JOBS_EAGER": True,
    })
    summarizer = app.extensions["summarizer"]
    summarizer.client = StubClient()
    summarizer.fetcher = StubFetcher(storage_dir)
    with app.app_context():
        # tables propres pour chaque test
        db.drop_all()
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def stub_client(app):
    return app.extensions["summarizer"].client


@pytest.fixture()
def stub_fetcher(app):
    return app.extensions["summarizer"].fetcher


@pytest.fixture()
def register(client):
    """Crée un compte et retourne son access token."""
    def _register(email, password="SuperSecret123", **extra):
        r = client.post("/api/v1/auth/register", json={"email": email, "password": password, **extra})
        assert r.status_code == 201, r.get_json()
        return r.get_json()["access_token"]
    return _register

