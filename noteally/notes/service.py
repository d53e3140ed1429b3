import logging
import uuid
from datetime import date, datetime, timedelta, timezone

from sqlalchemy import update, or_, func
from sqlalchemy.exc import IntegrityError

from noteally.common.errors import ApiError
from noteally.extensions import db
from noteally.notes.models import Note, NoteLike
from noteally.storage.backends import build_note_key

log = logging.getLogger(__name__)


def get_note_or_404(note_id: uuid.UUID, for_update: bool = False) -> Note:
    note = db.session.get(Note, note_id, with_for_update=True if for_update else None)
    if not note:
        raise ApiError("Note not found.", 404, "not_found")
    return note


def create_note(owner_id: uuid.UUID, title: str, subject: str, filename: str, data: bytes, storage) -> Note:
    key = build_note_key(owner_id, filename)
    url = storage.save(key, data, content_type="application/pdf")
    note = Note(title=title, subject=subject, file_url=url, file_key=key, owner_id=owner_id)
    db.session.add(note)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        # pas de note -> pas de fichier orphelin
        storage.delete(key)
        raise
    log.info("note_created", extra={"note_id": str(note.id), "owner_id": str(owner_id)})
    return note


def search_notes(q: str = None, subject: str = None):
    query = db.session.query(Note)
    if q:
        # sous-chaîne littérale: % et _ ne sont pas des jokers
        needle = q.lower()
        query = query.filter(or_(
            func.lower(Note.title).contains(needle, autoescape=True),
            func.lower(Note.subject).contains(needle, autoescape=True),
        ))
    if subject:
        query = query.filter(Note.subject == subject)
    return query.order_by(Note.created_at.desc())


def list_subjects():
    rows = db.session.query(Note.subject).distinct().order_by(Note.subject).all()
    return [r[0] for r in rows]


def toggle_like(note_id: uuid.UUID, user_id: uuid.UUID) -> bool:
    """Like / unlike en une transaction, note verrouillée.

    `likes` est recalculé depuis `note_likes`, donc likes == |liked_by|.
    Retourne True si l'utilisateur aime la note après l'appel.
    """
    note = get_note_or_404(note_id, for_update=True)
    existing = next((row for row in note.like_rows if row.user_id == user_id), None)
    if existing is not None:
        note.like_rows.remove(existing)
    else:
        note.like_rows.append(NoteLike(user_id=user_id))
    note.likes = len(note.like_rows)
    try:
        db.session.commit()
    except IntegrityError:
        # double clic concurrent du même utilisateur
        db.session.rollback()
        raise ApiError("Like update conflicted, please retry.", 409, "conflict", details={"note_id": str(note_id)})
    return existing is None


def record_view(note_id: uuid.UUID) -> int:
    # incrément atomique côté SQL, pas de dédoublonnage par lecteur
    res = db.session.execute(
        update(Note).where(Note.id == note_id).values(views=Note.views + 1)
    )
    if res.rowcount == 0:
        db.session.rollback()
        raise ApiError("Note not found.", 404, "not_found")
    db.session.commit()
    return db.session.query(Note.views).filter(Note.id == note_id).scalar()


def delete_note(note: Note, storage) -> None:
    note_id, key = note.id, note.file_key
    db.session.delete(note)
    db.session.commit()
    storage.delete(key)
    log.info("note_deleted", extra={"note_id": str(note_id)})


def _as_date(value: datetime) -> date:
    if value.tzinfo is None:
        # SQLite rend des datetimes naïfs (UTC)
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).date()


def owner_stats(owner_id: uuid.UUID, today: date = None) -> dict:
    today = today or datetime.now(timezone.utc).date()
    notes = db.session.query(Note).filter(Note.owner_id == owner_id).all()

    days = [today - timedelta(days=6 - i) for i in range(7)]
    counts = dict.fromkeys(days, 0)
    for n in notes:
        d = _as_date(n.created_at)
        if d in counts:
            counts[d] += 1

    return {
        "notes": len(notes),
        "total_likes": sum(n.likes for n in notes),
        "total_views": sum(n.views for n in notes),
        "uploads_last_7_days": [{"day": d, "count": counts[d]} for d in days],
    }
