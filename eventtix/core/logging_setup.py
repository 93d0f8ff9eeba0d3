import logging

from eventtix.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Configure root logging once for the API process and the worker."""
    level_name = (level or settings.LOG_LEVEL or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
    )
    # uvicorn installs its own handlers; keep its access log at our level
    logging.getLogger("uvicorn.access").setLevel(getattr(logging, level_name, logging.INFO))
