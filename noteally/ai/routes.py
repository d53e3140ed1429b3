from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from noteally.ai.errors import InvalidInput
from noteally.ai.schemas import ProcessPdfIn, SummaryOut
from noteally.common.uploads import read_pdf_upload

bp = Blueprint("ai", __name__)

process_pdf_in = ProcessPdfIn()
summary_out = SummaryOut()


def _summarizer():
    return current_app.extensions["summarizer"]


@bp.post("/process-pdf")
@jwt_required()
def process_pdf():
    payload = request.get_json(silent=True) or {}
    try:
        data = process_pdf_in.load(payload)
    except ValidationError as e:
        raise InvalidInput("No PDF URL provided.", details=e.messages)

    result = _summarizer().summarize_url(data["pdfUrl"])
    return jsonify(summary_out.dump(result.to_dict())), 200


@bp.post("/short-summary")
@jwt_required()
def short_summary():
    _, data = read_pdf_upload(request.files.get("file"))
    result = _summarizer().summarize_bytes(data)
    return jsonify(summary_out.dump(result.to_dict())), 200
