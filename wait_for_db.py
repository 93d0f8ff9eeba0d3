"""Block until the configured Postgres accepts connections. Imported for its side effect."""
import logging
import os
import time
from urllib.parse import urlparse

import psycopg2

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [wait_for_db] %(message)s")
log = logging.getLogger("wait_for_db")

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise SystemExit("DATABASE_URL is not set")

if DATABASE_URL.startswith("sqlite"):
    log.info("SQLite database, nothing to wait for.")
else:
    # SQLAlchemy URL may start with postgresql+psycopg2://
    url = DATABASE_URL.replace("postgresql+psycopg2://", "postgresql://").replace("postgres://", "postgresql://")
    p = urlparse(url)

    host = p.hostname or "db"
    port = p.port or 5432
    user = p.username or "eventtix"
    password = p.password or "eventtix"
    dbname = (p.path or "/eventtix").lstrip("/") or "eventtix"

    timeout_s = int(os.getenv("DB_WAIT_TIMEOUT", "60"))
    start = time.time()

    log.info("Waiting for Postgres at %s:%s db=%s user=%s (timeout=%ss)", host, port, dbname, user, timeout_s)
    while True:
        try:
            conn = psycopg2.connect(host=host, port=port, user=user, password=password, dbname=dbname)
            conn.close()
            log.info("Postgres is ready.")
            break
        except psycopg2.OperationalError as e:
            if time.time() - start > timeout_s:
                log.error("Timed out waiting for DB. Last error: %s", e)
                raise
            time.sleep(1)
