from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel

TicketStatus = Literal["pending", "verified", "rejected"]


class BuyTicketOut(BaseModel):
    success: bool = True
    message: str
    ticketCode: str


class TicketProjection(BaseModel):
    buyerName: str
    buyerEmail: str
    quantity: int
    totalPrice: float
    ticketCode: str
    status: str


class VerificationOut(BaseModel):
    valid: bool
    ticket: Optional[TicketProjection] = None


class TicketOut(BaseModel):
    """Admin view of a ticket."""
    ticketCode: str
    buyerName: str
    buyerEmail: str
    buyerPhone: str = ""
    category: str
    quantity: int
    totalPrice: float
    status: str
    bankTransferSlipId: str
    createdAt: datetime
    updatedAt: datetime


class TicketListOut(BaseModel):
    total: int
    items: List[TicketOut]


class TicketStatusUpdate(BaseModel):
    status: TicketStatus
    note: str = ""
