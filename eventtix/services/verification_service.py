"""Ticket verification: the public entry check and the admin status transition."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from eventtix.core.errors import InvalidRequestError, NotFoundError, NotVerifiedError, ValidationError
from eventtix.models.ticket import TICKET_STATUSES, Ticket
from eventtix.services.audit_service import log_audit
from eventtix.services.email_service import notify_status_changed

logger = logging.getLogger(__name__)


def find_ticket(db: Session, code: str) -> Ticket | None:
    return db.execute(select(Ticket).where(Ticket.ticket_code == code)).scalar_one_or_none()


def get_ticket(db: Session, code: str | None) -> Ticket:
    if not code or not code.strip():
        raise InvalidRequestError()
    ticket = find_ticket(db, code.strip())
    if not ticket:
        raise NotFoundError()
    return ticket


def ticket_projection(ticket: Ticket) -> dict:
    """Read-only fields a venue scanner gets back for a valid ticket."""
    return {
        "buyerName": ticket.buyer_name,
        "buyerEmail": ticket.buyer_email,
        "quantity": ticket.quantity,
        "totalPrice": float(ticket.total_price),
        "ticketCode": ticket.ticket_code,
        "status": ticket.status,
    }


def check_verification(db: Session, code: str | None) -> dict:
    """Return the ticket projection if `code` names a verified ticket. Read-only.

    Raises:
        InvalidRequestError: no code given.
        NotFoundError: no ticket has this code.
        NotVerifiedError: the ticket is pending or rejected.
    """
    ticket = get_ticket(db, code)
    if ticket.status != "verified":
        raise NotVerifiedError(ticket.status)
    return ticket_projection(ticket)


def set_status(db: Session, code: str, status: str, actor_email: str, note: str = "") -> Ticket:
    """Admin transition between pending, verified and rejected. Any transition is allowed."""
    if status not in TICKET_STATUSES:
        raise ValidationError(f"Status must be one of: {', '.join(TICKET_STATUSES)}")
    ticket = get_ticket(db, code)
    previous = ticket.status
    if previous == status:
        return ticket

    ticket.status = status
    log_audit(db, actor_email, "ticket.status_changed", "ticket", ticket.ticket_code,
              {"from": previous, "to": status, "note": note})
    db.commit()
    db.refresh(ticket)
    logger.info("Ticket %s: %s -> %s by %s", ticket.ticket_code, previous, status, actor_email)

    notify_status_changed(db, ticket)
    return ticket


def delete_ticket(db: Session, code: str, actor_email: str) -> None:
    """Hard delete. The receipt file stays in storage."""
    ticket = get_ticket(db, code)
    log_audit(db, actor_email, "ticket.deleted", "ticket", ticket.ticket_code,
              {"buyerEmail": ticket.buyer_email, "category": ticket.category,
               "quantity": ticket.quantity, "status": ticket.status})
    db.delete(ticket)
    db.commit()
    logger.info("Ticket %s deleted by %s", code, actor_email)
