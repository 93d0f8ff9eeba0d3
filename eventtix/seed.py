import logging
import uuid

from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import OperationalError, ProgrammingError

from eventtix.db.session import SessionLocal
from eventtix.core.config import settings
from eventtix.core.security import hash_password
from eventtix.models.user import User
from eventtix.services.event_config_service import get_or_create_config

logger = logging.getLogger(__name__)


def ensure_user(db: Session, email: str, password: str, role: str, name: str) -> bool:
    u = db.query(User).filter(User.email == email.lower()).first()
    if u:
        return False
    db.add(
        User(
            id=str(uuid.uuid4()),
            email=email.lower(),
            full_name=name,
            role=role,
            password_hash=hash_password(password),
            is_active=True,
        )
    )
    db.commit()
    return True


def run(db=None):
    own_session = db is None
    if own_session:
        db = SessionLocal()
    try:
        # If migrations haven't been applied yet, seeding must not crash the API.
        try:
            db.execute(text("SELECT 1 FROM users LIMIT 1"))
        except (ProgrammingError, OperationalError):
            db.rollback()
            logger.warning("users table not found yet. Skipping seeding (run alembic upgrade head).")
            return

        if ensure_user(db, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD, "superadmin", "Admin"):
            logger.info("Seeded admin user %s", settings.ADMIN_EMAIL)

        # empty singleton so the admin can fill it in
        get_or_create_config(db)
    finally:
        if own_session:
            db.close()


if __name__ == "__main__":
    from eventtix.core.logging_setup import setup_logging
    setup_logging()
    run()
