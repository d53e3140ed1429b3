from typing import Tuple

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from noteally.ai.errors import InvalidInput

PDF_MIMETYPES = ("application/pdf", "application/x-pdf")


def read_pdf_upload(file: FileStorage) -> Tuple[str, bytes]:
    """Valide un upload multipart `file` et retourne (nom sécurisé, contenu)."""
    if file is None or not file.filename:
        raise InvalidInput("No PDF file provided.", details={"field": "file"})

    filename = secure_filename(file.filename) or "note.pdf"
    if file.mimetype not in PDF_MIMETYPES and not filename.lower().endswith(".pdf"):
        raise InvalidInput("Please upload a PDF file.", details={"mimetype": file.mimetype})

    data = file.read()
    if not data:
        raise InvalidInput("Uploaded file is empty.", details={"field": "file"})
    return filename, data
