"""Event configuration: loaded once per request into an immutable value.

Routes receive an `EventSettings` through the `get_event_settings` dependency
and pass it explicitly to the workflows; nothing caches it between requests.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from eventtix.core.errors import InvalidCategoryError, ValidationError
from eventtix.models.event_config import EVENT_CONFIG_ID, EventConfig, TicketCategory
from eventtix.models.ticket import ACTIVE_STATUSES, Ticket

logger = logging.getLogger(__name__)

DEFAULT_TICKET_LABEL = "Buy Tickets"
DEFAULT_CURRENCY = "USD"


@dataclass(frozen=True)
class Category:
    """A named ticket tier with a price and a sell-through limit."""

    id: int
    name: str
    price: Decimal
    limit: int

    def __post_init__(self) -> None:
        if self.price < 0:
            raise ValueError("Category price cannot be negative")
        if self.limit < 0:
            raise ValueError("Category limit cannot be negative")


@dataclass(frozen=True)
class EventSettings:
    content: str = ""
    ticket_label: str = DEFAULT_TICKET_LABEL
    currency: str = DEFAULT_CURRENCY
    bank_account_name: str | None = None
    bank_account_number: str | None = None
    featured_image_id: str | None = None
    # keyed by exact name, in display order
    categories: dict[str, Category] = field(default_factory=dict)

    def category(self, name: str) -> Category:
        """Resolve a category by exact name; unknown names are invalid, not sold out."""
        try:
            return self.categories[name]
        except KeyError:
            raise InvalidCategoryError(name) from None


def get_or_create_config(db: Session) -> EventConfig:
    cfg = db.get(EventConfig, EVENT_CONFIG_ID)
    if not cfg:
        cfg = EventConfig(
            id=EVENT_CONFIG_ID,
            content="",
            ticket_label=DEFAULT_TICKET_LABEL,
            currency=DEFAULT_CURRENCY,
        )
        db.add(cfg)
        db.commit()
        db.refresh(cfg)
    return cfg


def load_event_settings(db: Session) -> EventSettings:
    cfg = db.get(EventConfig, EVENT_CONFIG_ID)
    if not cfg:
        # Nothing configured yet: the page renders without a purchase form
        return EventSettings()
    categories = {
        c.name: Category(id=c.id, name=c.name, price=Decimal(c.price or 0), limit=int(c.limit or 0))
        for c in cfg.ticket_categories
    }
    return EventSettings(
        content=cfg.content or "",
        ticket_label=cfg.ticket_label or DEFAULT_TICKET_LABEL,
        currency=cfg.currency or DEFAULT_CURRENCY,
        bank_account_name=cfg.bank_account_name or None,
        bank_account_number=cfg.bank_account_number or None,
        featured_image_id=cfg.featured_image_id,
        categories=categories,
    )


def _active_categories_with_tickets(db: Session) -> set[str]:
    rows = db.execute(
        select(Ticket.category).where(Ticket.status.in_(ACTIVE_STATUSES)).distinct()
    ).scalars()
    return set(rows)


def update_event_config(db: Session, data: dict) -> EventSettings:
    """Apply an admin update and return the reloaded settings.

    `data` uses the admin schema field names; absent keys are left unchanged.
    `ticketCategories`, when given, replaces the whole ordered list. A category
    that still has pending or verified tickets cannot be removed or renamed,
    since tickets reference categories by name.
    """
    incoming = None
    if "ticketCategories" in data:
        incoming = data["ticketCategories"] or []
        names = [c["name"].strip() for c in incoming]
        if any(not n for n in names):
            raise ValidationError("Category name is required")
        if len(set(names)) != len(names):
            raise ValidationError("Category names must be unique")
        for c in incoming:
            if Decimal(str(c["price"])) < 0 or int(c["limit"]) < 0:
                raise ValidationError("Category price and limit must be non-negative")

        missing = _active_categories_with_tickets(db) - set(names)
        if missing:
            raise ValidationError(
                "Cannot remove categories with active tickets: " + ", ".join(sorted(missing))
            )

    cfg = get_or_create_config(db)
    for key, attr in (
        ("content", "content"),
        ("ticketLabel", "ticket_label"),
        ("currency", "currency"),
        ("bankAccountName", "bank_account_name"),
        ("bankAccountNumber", "bank_account_number"),
    ):
        if key in data:
            setattr(cfg, attr, data[key])
    if "featuredImageId" in data:
        # a blank id clears the image; the column is a foreign key
        cfg.featured_image_id = data["featuredImageId"] or None

    if incoming is not None:
        existing = {c.name: c for c in cfg.ticket_categories}
        updated = []
        for position, c in enumerate(incoming):
            name = c["name"].strip()
            row = existing.get(name) or TicketCategory(name=name)
            row.position = position
            row.price = Decimal(str(c["price"]))
            row.limit = int(c["limit"])
            updated.append(row)
        cfg.ticket_categories = updated

    db.commit()
    db.refresh(cfg)
    logger.info("Event configuration updated (%d categories)", len(cfg.ticket_categories))
    return load_event_settings(db)
