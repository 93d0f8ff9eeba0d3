from decimal import Decimal
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, field_validator


class CategoryIn(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    price: Decimal = Field(ge=0)
    limit: int = Field(ge=0)


class CategoryOut(BaseModel):
    name: str
    price: float
    limit: int
    remaining: int


class EventConfigIn(BaseModel):
    """Partial update: omitted fields keep their value. ticketCategories replaces the whole list."""
    content: Optional[str] = None
    ticketLabel: Optional[str] = None
    currency: Optional[str] = Field(default=None, max_length=10)
    bankAccountName: Optional[str] = None
    bankAccountNumber: Optional[str] = None
    featuredImageId: Optional[str] = None
    ticketCategories: Optional[List[CategoryIn]] = None

    @field_validator("featuredImageId")
    @classmethod
    def blank_image_clears(cls, v: Optional[str]) -> Optional[str]:
        return (v or "").strip() or None


class EventConfigOut(BaseModel):
    content: str
    ticketLabel: str
    currency: str
    bankAccountName: Optional[str] = None
    bankAccountNumber: Optional[str] = None
    featuredImageId: Optional[str] = None
    ticketCategories: List[CategoryOut]


class AvailabilityOut(BaseModel):
    remaining: Dict[str, int]


class MediaOut(BaseModel):
    id: str
    filename: str
    mimeType: str
    size: int
    url: str
