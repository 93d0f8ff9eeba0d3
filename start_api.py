#!/usr/bin/env python3
"""Container entrypoint: wait for the database, migrate, seed, then replace this process with uvicorn."""
import logging
import os
import sys

import wait_for_db  # noqa: F401  blocks until Postgres answers

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from eventtix.core.config import settings
from eventtix.core.logging_setup import setup_logging

ROOT = os.path.dirname(os.path.abspath(__file__))
logger = logging.getLogger("start_api")


def migrate() -> None:
    cfg = Config(os.path.join(ROOT, "alembic.ini"))
    cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
    command.upgrade(cfg, "head")


def seed() -> None:
    # Own engine, created after the migration so it sees the new tables
    from eventtix.seed import run

    engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True)
    db = sessionmaker(bind=engine, autoflush=False)()
    try:
        run(db)
    finally:
        db.close()
        engine.dispose()


def serve() -> None:
    port = os.getenv("PORT", "8000")
    logger.info("Starting uvicorn on port %s", port)
    os.execv(sys.executable, [sys.executable, "-m", "uvicorn", "eventtix.main:app", "--host", "0.0.0.0", "--port", port])


if __name__ == "__main__":
    setup_logging()
    migrate()
    seed()
    serve()
