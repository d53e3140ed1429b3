import uuid
from datetime import datetime, timezone

from sqlalchemy import func, ForeignKey, Uuid
from sqlalchemy.exc import IntegrityError

from noteally.extensions import db


class TokenBlocklist(db.Model):
    """JTI révoqués: refresh consommé par la rotation, ou logout explicite."""
    __tablename__ = "token_blocklist"

    id = db.Column(db.Integer, primary_key=True)
    jti = db.Column(db.String(36), unique=True, nullable=False, index=True)
    token_type = db.Column(db.String(16), nullable=False)  # "access" | "refresh"
    user_id = db.Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    # après exp le token est refusé de toute façon: la ligne devient inutile
    expires_at = db.Column(db.DateTime(timezone=True), nullable=True)
    revoked_at = db.Column(db.DateTime(timezone=True), server_default=func.now(), nullable=False)

    @classmethod
    def is_revoked(cls, jti: str) -> bool:
        return db.session.query(cls.id).filter_by(jti=jti).first() is not None

    @classmethod
    def revoke(cls, claims: dict) -> None:
        """Révoque le JWT décodé `claims` (idempotent)."""
        jti = claims["jti"]
        if cls.is_revoked(jti):
            return
        try:
            user_id = uuid.UUID(claims.get("sub"))
        except (TypeError, ValueError):
            user_id = None
        exp = claims.get("exp")
        db.session.add(cls(
            jti=jti,
            token_type=claims.get("type", "access"),
            user_id=user_id,
            expires_at=datetime.fromtimestamp(exp, timezone.utc) if exp else None,
        ))
        try:
            db.session.commit()
        except IntegrityError:
            # révoqué en parallèle par une autre requête
            db.session.rollback()
