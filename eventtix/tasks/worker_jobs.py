"""Job bodies run by the Celery worker; each opens and closes its own session."""
import logging

from sqlalchemy.exc import OperationalError, ProgrammingError

from eventtix.core.config import settings
from eventtix.db.session import SessionLocal
from eventtix.services.email_service import process_pending_emails

logger = logging.getLogger(__name__)


def send_pending_emails(limit: int = 50) -> dict:
    db = SessionLocal()
    try:
        result = process_pending_emails(db, limit=limit, max_attempts=settings.EMAIL_MAX_ATTEMPTS)
    except (ProgrammingError, OperationalError):
        # the worker can start before migrations have run
        db.rollback()
        logger.warning("email_logs table is not available yet, skipping this run")
        return {"skipped": True}
    finally:
        db.close()
    if result["processed"]:
        logger.info("Email retry: %(processed)d processed, %(sent)d sent, %(failed)d failed", result)
    return result
