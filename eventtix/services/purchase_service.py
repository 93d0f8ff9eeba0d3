"""Ticket purchase: validate, reserve inventory, store the receipt, create a pending ticket."""
from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventtix.core.config import settings
from eventtix.core.errors import (
    ConflictError,
    DomainError,
    InsufficientInventoryError,
    InvalidCategoryError,
    SoldOutError,
    ValidationError,
)
from eventtix.models.event_config import TicketCategory
from eventtix.models.ticket import Ticket
from eventtix.services.email_service import notify_purchase_received
from eventtix.services.event_config_service import Category, EventSettings
from eventtix.services.inventory_service import remaining_for
from eventtix.services.storage_service import save_upload
from eventtix.services.ticket_service import make_ticket_code

logger = logging.getLogger(__name__)

PURCHASE_MESSAGE = (
    "Your ticket purchase is being processed. You will receive an email once your payment is verified."
)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(frozen=True)
class ReceiptUpload:
    filename: str
    content_type: str
    content: bytes


@dataclass(frozen=True)
class PurchaseRequest:
    buyer_name: str | None
    buyer_email: str | None
    category: str | None
    quantity: int | str | None
    receipt: ReceiptUpload | None
    buyer_phone: str | None = None
    # client-claimed total; informational only, the server computes the price
    total_price: Decimal | str | None = None


@dataclass(frozen=True)
class PurchaseResult:
    ticket_code: str
    message: str
    total_price: Decimal


def _parse_quantity(raw) -> int:
    try:
        qty = int(str(raw).strip())
    except (TypeError, ValueError):
        raise ValidationError("Quantity must be a whole number") from None
    if qty < 1:
        raise ValidationError("Quantity must be at least 1")
    return qty


def _receipt_type_allowed(content_type: str) -> bool:
    ct = (content_type or "").split(";", 1)[0].strip().lower()
    if not ct:
        return False
    for allowed in settings.ALLOWED_RECEIPT_TYPES.split(","):
        allowed = allowed.strip().lower()
        if not allowed:
            continue
        if allowed.endswith("/*") and ct.startswith(allowed[:-1]):
            return True
        if ct == allowed:
            return True
    return False


def validate_request(req: PurchaseRequest) -> int:
    """Check required fields and formats; returns the parsed quantity."""
    if not (req.buyer_name or "").strip() or not (req.buyer_email or "").strip() \
            or not (req.category or "").strip() or req.quantity in (None, "") \
            or req.receipt is None or not req.receipt.content:
        raise ValidationError("Missing required fields")
    if not _EMAIL_RE.match(req.buyer_email.strip()):
        raise ValidationError("Invalid email address")
    qty = _parse_quantity(req.quantity)
    if len(req.receipt.content) > settings.MAX_RECEIPT_BYTES:
        raise ValidationError("Bank transfer slip is too large")
    if not _receipt_type_allowed(req.receipt.content_type):
        raise ValidationError("Bank transfer slip must be an image or PDF")
    return qty


def _claimed_total(raw) -> Decimal | None:
    if raw in (None, ""):
        return None
    try:
        return Decimal(str(raw))
    except InvalidOperation:
        return None


def _lock_category(db: Session, category: Category) -> Category:
    """Row-lock the category for the rest of the transaction and return its current values."""
    row = db.execute(
        select(TicketCategory).where(TicketCategory.id == category.id).with_for_update()
    ).scalar_one_or_none()
    if row is None or row.name != category.name:
        # removed or renamed by an admin since the config was loaded
        raise InvalidCategoryError(category.name)
    return Category(id=row.id, name=row.name, price=Decimal(row.price or 0), limit=int(row.limit or 0))


def purchase_ticket(db: Session, event: EventSettings, req: PurchaseRequest) -> PurchaseResult:
    """Create a pending ticket if the category has room for the requested quantity.

    The inventory check, receipt storage and ticket insert run in one
    transaction holding a lock on the category row, so two buyers cannot both
    take the last tickets. No ticket and no file are written when any check fails.

    Raises:
        ValidationError, InvalidCategoryError, SoldOutError,
        InsufficientInventoryError, StorageError, ConflictError.
    """
    qty = validate_request(req)
    category = event.category(req.category.strip())

    try:
        category = _lock_category(db, category)
        left = remaining_for(db, category)
        if left <= 0:
            raise SoldOutError(category.name)
        if qty > left:
            raise InsufficientInventoryError(category.name, left)

        total = category.price * qty
        claimed = _claimed_total(req.total_price)
        if claimed is not None and claimed != total:
            logger.warning(
                "Client total %s differs from computed total %s for %s x %s; using computed total",
                claimed, total, qty, category.name,
            )

        buyer_name = req.buyer_name.strip()
        slip = save_upload(
            db,
            folder="receipts",
            filename=req.receipt.filename,
            content=req.receipt.content,
            mime_type=req.receipt.content_type,
            alt=f"Bank transfer slip from {buyer_name}",
        )

        ticket = Ticket(
            id=str(uuid.uuid4()),
            ticket_code=make_ticket_code(),
            buyer_name=buyer_name,
            buyer_email=req.buyer_email.strip(),
            buyer_phone=(req.buyer_phone or "").strip(),
            category=category.name,
            quantity=qty,
            total_price=total,
            status="pending",
            bank_transfer_slip_id=slip.id,
        )
        db.add(ticket)
        db.commit()
    except DomainError:
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        logger.warning("Ticket insert conflicted for category %s: %s", category.name, e.orig)
        raise ConflictError() from e

    db.refresh(ticket)
    code = ticket.ticket_code
    logger.info("Ticket %s created: %s x %s for %s", code, qty, category.name, ticket.buyer_email)
    try:
        notify_purchase_received(db, ticket)
    except Exception:
        # the ticket is committed; the buyer still gets the code in the response
        db.rollback()
        logger.exception("Queueing the confirmation email for ticket %s failed", code)
    return PurchaseResult(ticket_code=code, message=PURCHASE_MESSAGE, total_price=total)
