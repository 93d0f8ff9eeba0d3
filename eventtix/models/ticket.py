from decimal import Decimal
from sqlalchemy import CheckConstraint, String, Integer, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime, timezone
from eventtix.db.session import Base
from eventtix.models.media import MediaFile

TICKET_STATUSES = ("pending", "verified", "rejected")
# statuses that hold inventory
ACTIVE_STATUSES = ("pending", "verified")


class Ticket(Base):
    __tablename__ = "tickets"
    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_tickets_quantity_positive"),
        CheckConstraint("status IN ('pending', 'verified', 'rejected')", name="ck_tickets_status"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    ticket_code: Mapped[str] = mapped_column(String(12), unique=True, index=True)

    buyer_name: Mapped[str] = mapped_column(String(200))
    buyer_email: Mapped[str] = mapped_column(String(320), index=True)
    buyer_phone: Mapped[str] = mapped_column(String(40), default="")

    # category name, not a foreign key: tickets keep the name they were sold under
    category: Mapped[str] = mapped_column(String(120), index=True)
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    total_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)

    status: Mapped[str] = mapped_column(String(20), default="pending", index=True)  # pending, verified, rejected

    bank_transfer_slip_id: Mapped[str] = mapped_column(String(36), ForeignKey("media_files.id"))
    bank_transfer_slip = relationship(MediaFile, lazy="joined")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
