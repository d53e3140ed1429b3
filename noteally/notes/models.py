import uuid
from datetime import datetime, timezone
from sqlalchemy import func, ForeignKey, CheckConstraint, UniqueConstraint, Uuid
from noteally.extensions import db

# états du job de résumé IA
SUMMARY_IDLE = "idle"
SUMMARY_PENDING = "pending"
SUMMARY_READY = "ready"
SUMMARY_FAILED = "failed"


class Note(db.Model):
    __tablename__ = "notes"
    __table_args__ = (
        CheckConstraint("likes >= 0", name="ck_notes_likes_non_negative"),
        CheckConstraint("views >= 0", name="ck_notes_views_non_negative"),
    )

    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = db.Column(db.String(200), nullable=False)
    subject = db.Column(db.String(100), nullable=False, index=True)
    file_url = db.Column(db.Text, nullable=False)
    file_key = db.Column(db.String(512), nullable=False)

    owner_id = db.Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    owner = db.relationship("User", back_populates="notes", lazy="joined", innerjoin=True)

    likes = db.Column(db.Integer, nullable=False, default=0, server_default="0")
    views = db.Column(db.Integer, nullable=False, default=0, server_default="0")
    like_rows = db.relationship(
        "NoteLike", back_populates="note", lazy="selectin",
        cascade="all, delete-orphan",
    )

    summary = db.Column(db.Text, nullable=True)
    points = db.Column(db.Text, nullable=True)
    summary_status = db.Column(db.String(16), nullable=False, default=SUMMARY_IDLE, server_default=SUMMARY_IDLE)
    summary_error = db.Column(db.Text, nullable=True)
    # début du job en cours; un pending plus vieux que SUMMARY_JOB_STALE_SECONDS est abandonné
    summary_started_at = db.Column(db.DateTime(timezone=True), nullable=True)

    # horodatage côté Python: résolution à la microseconde (tri par récence)
    created_at = db.Column(
        db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
        server_default=func.now(), nullable=False, index=True,
    )

    @property
    def liked_by(self):
        return sorted(str(row.user_id) for row in self.like_rows)

    @property
    def owner_email(self):
        return self.owner.email if self.owner else None


class NoteLike(db.Model):
    """Une ligne par (note, utilisateur): l'ensemble liked_by."""
    __tablename__ = "note_likes"
    __table_args__ = (UniqueConstraint("note_id", "user_id", name="uq_note_likes_note_user"),)

    id = db.Column(db.Integer, primary_key=True)
    note_id = db.Column(Uuid, ForeignKey("notes.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = db.Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now(), nullable=False)

    note = db.relationship("Note", back_populates="like_rows")
