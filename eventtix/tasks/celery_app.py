import logging
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

from celery import Celery
from celery.signals import after_setup_logger

from eventtix.core.config import settings
from eventtix.core.logging_setup import LOG_FORMAT


def broker_url(url: str) -> str:
    """rediss:// brokers need an explicit ssl_cert_reqs for Celery to connect."""
    parsed = urlparse(url or "")
    if parsed.scheme != "rediss":
        return url
    query = parse_qs(parsed.query)
    query.setdefault("ssl_cert_reqs", ["CERT_NONE"])
    return urlunparse(parsed._replace(query=urlencode(query, doseq=True)))


celery = Celery("eventtix", include=["eventtix.tasks.jobs"])
celery.conf.update(
    broker_url=broker_url(settings.REDIS_URL),
    result_backend=broker_url(settings.REDIS_URL),
    timezone="UTC",
    beat_schedule={
        "send-pending-emails": {
            "task": "eventtix.tasks.jobs.send_pending_emails",
            "schedule": settings.EMAIL_RETRY_INTERVAL_SECONDS,
        },
    },
)


@after_setup_logger.connect
def _app_log_format(logger, *args, **kwargs):
    for handler in logger.handlers:
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
