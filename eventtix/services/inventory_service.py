from __future__ import annotations

from typing import Iterable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from eventtix.models.ticket import ACTIVE_STATUSES, Ticket
from eventtix.services.event_config_service import Category, EventSettings


def remaining(category: Category, quantities: Iterable[int]) -> int:
    """Capacity left in `category` given the quantities of its pending/verified tickets. Pure function."""
    sold = sum(int(q or 0) for q in quantities)
    return max(0, category.limit - sold)


def sold_quantity(db: Session, category_name: str) -> int:
    total = db.execute(
        select(func.coalesce(func.sum(Ticket.quantity), 0)).where(
            Ticket.category == category_name,
            Ticket.status.in_(ACTIVE_STATUSES),
        )
    ).scalar_one()
    return int(total or 0)


def remaining_for(db: Session, category: Category) -> int:
    return remaining(category, [sold_quantity(db, category.name)])


def availability(db: Session, event: EventSettings) -> dict[str, int]:
    """Remaining count per configured category, in display order."""
    if not event.categories:
        return {}
    rows = db.execute(
        select(Ticket.category, func.coalesce(func.sum(Ticket.quantity), 0))
        .where(
            Ticket.category.in_(list(event.categories)),
            Ticket.status.in_(ACTIVE_STATUSES),
        )
        .group_by(Ticket.category)
    ).all()
    sold = {name: int(total or 0) for name, total in rows}
    return {name: remaining(c, [sold.get(name, 0)]) for name, c in event.categories.items()}
