from decimal import Decimal
from sqlalchemy import String, Integer, DateTime, Numeric, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime, timezone
from eventtix.db.session import Base
from eventtix.models.media import MediaFile

EVENT_CONFIG_ID = 1


class EventConfig(Base):
    """Singleton row (id=1) holding the event page and its ticket categories."""

    __tablename__ = "event_config"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    featured_image_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("media_files.id"), nullable=True)
    content: Mapped[str] = mapped_column(Text, default="")
    ticket_label: Mapped[str] = mapped_column(String(80), default="Buy Tickets")
    currency: Mapped[str] = mapped_column(String(10), default="USD")
    bank_account_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    bank_account_number: Mapped[str | None] = mapped_column(String(80), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    featured_image = relationship(MediaFile)
    ticket_categories: Mapped[list["TicketCategory"]] = relationship(
        back_populates="event_config",
        order_by="TicketCategory.position",
        cascade="all, delete-orphan",
    )


class TicketCategory(Base):
    __tablename__ = "ticket_categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_config_id: Mapped[int] = mapped_column(Integer, ForeignKey("event_config.id", ondelete="CASCADE"), index=True)
    position: Mapped[int] = mapped_column(Integer, default=0)
    name: Mapped[str] = mapped_column(String(120), unique=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    limit: Mapped[int] = mapped_column(Integer, default=0)  # max tickets sold in this category

    event_config: Mapped[EventConfig] = relationship(back_populates="ticket_categories")
