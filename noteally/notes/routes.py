from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from noteally.common.errors import ApiError
from noteally.common.uploads import read_pdf_upload
from noteally.notes import service
from noteally.notes.schemas import NoteIn, NoteOut, StatsOut
from noteally.notes.models import Note
import uuid

bp = Blueprint("notes", __name__)

note_in = NoteIn()
note_out = NoteOut()
note_out_many = NoteOut(many=True)
stats_out = StatsOut()

def _current_user_id() -> uuid.UUID:
    return uuid.UUID(get_jwt_identity())

def _ensure_owner(note: Note, user_id: uuid.UUID):
    if note.owner_id != user_id:
        raise ApiError(
            "Forbidden: you do not own this note.",
            status_code=403,
            code="forbidden",
            details={"note_id": str(note.id)}
        )

def _pagination():
    # Pagination simple bornée
    try:
        page = max(int(request.args.get("page", 1)), 1)
        per_page = int(request.args.get("per_page", 20))
        per_page = 1 if per_page < 1 else 100 if per_page > 100 else per_page
    except ValueError:
        raise ApiError("Invalid pagination params.", 400, "validation_error")
    return page, per_page

def _paged(query):
    page, per_page = _pagination()
    total = query.count()
    items = query.limit(per_page).offset((page - 1) * per_page).all()
    return jsonify({
        "status": "success",
        "data": note_out_many.dump(items),
        "meta": {"page": page, "per_page": per_page, "total": total}
    }), 200

@bp.post("/")
@jwt_required()
def create_note():
    # multipart: title, subject, file (+ summarize optionnel)
    data = note_in.load(request.form)
    filename, content = read_pdf_upload(request.files.get("file"))

    note = service.create_note(
        owner_id=_current_user_id(),
        title=data["title"],
        subject=data["subject"],
        filename=filename,
        data=content,
        storage=current_app.extensions["storage"],
    )
    if data["summarize"]:
        current_app.extensions["summary_jobs"].submit(note)
    return jsonify(note_out.dump(note)), 201

@bp.get("/")
def list_notes():
    # flux public, trié par récence
    q = (request.args.get("q") or "").strip() or None
    subject = (request.args.get("subject") or "").strip() or None
    return _paged(service.search_notes(q=q, subject=subject))

@bp.get("/subjects")
def list_subjects():
    return jsonify({"status": "success", "data": service.list_subjects()}), 200

@bp.get("/mine")
@jwt_required()
def my_notes():
    query = service.search_notes().filter(Note.owner_id == _current_user_id())
    return _paged(query)

@bp.get("/stats")
@jwt_required()
def my_stats():
    return jsonify(stats_out.dump(service.owner_stats(_current_user_id()))), 200

@bp.get("/<uuid:note_id>")
def get_note(note_id):
    return jsonify(note_out.dump(service.get_note_or_404(note_id))), 200

@bp.post("/<uuid:note_id>/like")
@jwt_required()
def toggle_like(note_id):
    liked = service.toggle_like(note_id, _current_user_id())
    note = service.get_note_or_404(note_id)
    return jsonify({"liked": liked, "note": note_out.dump(note)}), 200

@bp.post("/<uuid:note_id>/view")
def record_view(note_id):
    views = service.record_view(note_id)
    return jsonify({"id": str(note_id), "views": views}), 200

@bp.post("/<uuid:note_id>/summary")
@jwt_required()
def generate_summary(note_id):
    note = service.get_note_or_404(note_id)
    current_app.extensions["summary_jobs"].submit(note)
    # en mode eager le job est déjà terminé; sinon status == "pending"
    note = service.get_note_or_404(note_id)
    return jsonify(note_out.dump(note)), 202

@bp.delete("/<uuid:note_id>")
@jwt_required()
def delete_note(note_id):
    note = service.get_note_or_404(note_id)
    _ensure_owner(note, _current_user_id())
    service.delete_note(note, current_app.extensions["storage"])
    return ("", 204)
