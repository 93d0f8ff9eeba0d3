from eventtix.tasks import worker_jobs
from eventtix.tasks.celery_app import celery


@celery.task(name="eventtix.tasks.jobs.send_pending_emails", ignore_result=True)
def send_pending_emails(limit: int = 50):
    """Beat job: retry buyer emails that are still queued or failed."""
    return worker_jobs.send_pending_emails(limit=limit)
