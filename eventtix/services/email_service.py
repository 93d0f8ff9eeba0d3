import logging
import smtplib
import uuid
from datetime import datetime, timezone
from email.message import EmailMessage

import requests
from sqlalchemy.orm import Session

from eventtix.core.config import settings
from eventtix.models.email_log import EmailLog
from eventtix.models.ticket import Ticket
from eventtix.services.ticket_service import ticket_url

logger = logging.getLogger(__name__)


def queue_email(db: Session, to_email: str, subject: str, body: str, kind: str = "generic",
                ticket_code: str = "", deliver: bool = True) -> str:
    """Log the email and, when `deliver` is set, try to send it right away.

    Anything left queued or failed is sent by the send_pending_emails job.
    """
    eid = str(uuid.uuid4())
    log = EmailLog(
        id=eid,
        kind=kind,
        to_email=to_email,
        subject=subject,
        body=body,
        status="queued",
        attempts=0,
        ticket_code=ticket_code,
    )
    db.add(log)
    db.commit()

    if not deliver or not settings.EMAIL_ENABLED:
        return eid

    _attempt(log)
    db.commit()
    return eid


def _attempt(log: EmailLog) -> bool:
    log.attempts = (log.attempts or 0) + 1
    try:
        send_email(log.to_email, log.subject, log.body)
    except Exception as e:
        # left for the send_pending_emails beat job
        logger.warning("Sending %s email %s to %s failed: %s", log.kind, log.id, log.to_email, e)
        log.status = "failed"
        log.last_error = str(e)[:500]
        return False
    log.status = "sent"
    log.sent_at = datetime.now(timezone.utc)
    log.last_error = ""
    return True


def send_email(to_email: str, subject: str, body: str):
    """Send a plain-text email via SendGrid if configured, otherwise SMTP (MailHog works locally)."""
    if settings.SENDGRID_API_KEY:
        _send_via_sendgrid(to_email, subject, body)
        return

    msg = EmailMessage()
    msg["From"] = settings.SMTP_FROM
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(body)

    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10) as smtp:
        if settings.SMTP_USERNAME:
            smtp.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
        smtp.send_message(msg)


def _send_via_sendgrid(to_email: str, subject: str, body: str):
    payload = {
        "personalizations": [{"to": [{"email": to_email}]}],
        "from": {"email": settings.SENDGRID_FROM_EMAIL or settings.SMTP_FROM},
        "subject": subject,
        "content": [{"type": "text/plain", "value": body}],
    }
    r = requests.post(
        "https://api.sendgrid.com/v3/mail/send",
        json=payload,
        headers={"Authorization": f"Bearer {settings.SENDGRID_API_KEY}"},
        timeout=20,
    )
    if r.status_code >= 400:
        raise RuntimeError(f"SendGrid error {r.status_code}: {r.text}")


def process_pending_emails(db: Session, limit: int = 50, max_attempts: int = 5) -> dict:
    """Retry up to `limit` queued or failed emails. Returns counts."""
    pending = (
        db.query(EmailLog)
        .filter(
            EmailLog.status.in_(["queued", "failed"]),
            EmailLog.attempts < max_attempts,
            EmailLog.body != "",
        )
        .order_by(EmailLog.created_at.asc())
        .limit(limit)
        .all()
    )
    sent, failed = 0, 0
    for log in pending:
        if _attempt(log):
            sent += 1
        else:
            failed += 1
    if pending:
        db.commit()
    return {"processed": len(pending), "sent": sent, "failed": failed}


# Buyer notifications

def notify_purchase_received(db: Session, ticket: Ticket) -> str:
    """Queue the order confirmation; the worker sends it so the purchase request never waits on SMTP."""
    body = (
        f"Hello {ticket.buyer_name},\n\n"
        f"We received your order for {ticket.quantity} x {ticket.category} ticket(s).\n"
        f"Ticket code: {ticket.ticket_code}\n\n"
        "Your ticket purchase is being processed. You will receive an email once your payment is verified.\n"
        f"Track your ticket here: {ticket_url(ticket.ticket_code)}\n"
    )
    return queue_email(db, ticket.buyer_email, f"Ticket order received ({ticket.ticket_code})", body,
                       kind="purchase_received", ticket_code=ticket.ticket_code, deliver=False)


def notify_status_changed(db: Session, ticket: Ticket) -> str | None:
    if ticket.status == "verified":
        subject = f"Your ticket is confirmed ({ticket.ticket_code})"
        body = (
            f"Hello {ticket.buyer_name},\n\n"
            "Your payment has been verified. Open your ticket and present its QR code at the venue:\n"
            f"{ticket_url(ticket.ticket_code)}\n"
        )
        kind = "ticket_verified"
    elif ticket.status == "rejected":
        subject = f"We could not verify your payment ({ticket.ticket_code})"
        body = (
            f"Hello {ticket.buyer_name},\n\n"
            "Your payment could not be verified. Please contact support and quote your ticket code "
            f"{ticket.ticket_code}.\n"
        )
        kind = "ticket_rejected"
    else:
        return None
    return queue_email(db, ticket.buyer_email, subject, body, kind=kind, ticket_code=ticket.ticket_code)
