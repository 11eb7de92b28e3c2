"""Booking domain schemas - Pydantic models for validation"""

from pydantic import BaseModel, field_validator

from ...config import MIN_BOOKING_AMOUNT
from ...models import ConsultantType


class BookingCreate(BaseModel):
    """Schema for creating a consultation booking"""

    consultantType: ConsultantType
    details: str
    amount: int

    @field_validator("details")
    @classmethod
    def validate_details(cls, v: str) -> str:
        v = v.strip()
        if not 10 <= len(v) <= 1000:
            raise ValueError("Details must be between 10 and 1000 characters")
        return v

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: int) -> int:
        if v < MIN_BOOKING_AMOUNT:
            raise ValueError(f"Amount must be at least {MIN_BOOKING_AMOUNT} paise")
        return v
