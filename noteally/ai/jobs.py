"""Résumé IA en arrière-plan pour une note déjà déposée.

Un thread par job, sans file ni pool. À la fin du job, `_on_done` écrit
le résultat (ou l'erreur) sur la note: pending -> ready | failed.

Un job dont le thread a disparu (redémarrage, redéploiement) laisse la note
en `pending`; passé `stale_after` secondes, la note peut être resoumise.
"""
import logging
import threading
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import update, or_

from noteally.common.errors import ApiError
from noteally.extensions import db
from noteally.notes.models import Note, SUMMARY_PENDING, SUMMARY_READY, SUMMARY_FAILED

log = logging.getLogger(__name__)

DEFAULT_STALE_SECONDS = 900


class SummaryJobRunner:
    def __init__(self, app, summarizer, eager: bool = False, stale_after: int = DEFAULT_STALE_SECONDS):
        self.app = app
        self.summarizer = summarizer
        self.eager = eager
        self.stale_after = stale_after

    def _claim(self, note_id: uuid.UUID) -> bool:
        """Passe la note en pending en un seul UPDATE conditionnel."""
        now = datetime.now(timezone.utc)
        res = db.session.execute(
            update(Note)
            .where(Note.id == note_id)
            .where(or_(
                Note.summary_status != SUMMARY_PENDING,
                Note.summary_started_at.is_(None),
                Note.summary_started_at < now - timedelta(seconds=self.stale_after),
            ))
            .values(summary_status=SUMMARY_PENDING, summary_error=None, summary_started_at=now)
            .execution_options(synchronize_session=False)
        )
        if res.rowcount == 0:
            db.session.rollback()
            return False
        db.session.commit()
        return True

    def submit(self, note: Note) -> None:
        note_id, url = note.id, note.file_url
        stale = note.summary_status == SUMMARY_PENDING
        if not self._claim(note_id):
            raise ApiError("A summary is already being generated for this note.", 409, "conflict",
                           details={"note_id": str(note_id)})
        if stale:
            log.warning("summary_job_stale_reclaimed", extra={"note_id": str(note_id)})

        log.info("summary_job_submitted", extra={"note_id": str(note_id), "eager": self.eager})
        if self.eager:
            self._run(note_id, url)
        else:
            threading.Thread(target=self._run, args=(note_id, url), daemon=True,
                             name=f"summary-{note_id}").start()

    def _run(self, note_id: uuid.UUID, url: str) -> None:
        with self.app.app_context():
            try:
                result = self.summarizer.summarize_url(url)
            except ApiError as e:
                self._on_done(note_id, error=e.message)
            except Exception as e:
                log.exception("summary_job_crashed", extra={"note_id": str(note_id)})
                self._on_done(note_id, error=str(e) or e.__class__.__name__)
            else:
                self._on_done(note_id, result=result)

    def _on_done(self, note_id, result=None, error=None) -> None:
        note = db.session.get(Note, note_id)
        if note is None:
            # supprimée pendant la génération
            log.info("summary_job_orphaned", extra={"note_id": str(note_id)})
            return

        if result is not None:
            note.summary = result.summary
            note.points = result.points
            note.summary_status = SUMMARY_READY
            note.summary_error = None
        else:
            note.summary_status = SUMMARY_FAILED
            note.summary_error = error
        db.session.commit()
        log.info("summary_job_done", extra={"note_id": str(note_id), "status": note.summary_status})
