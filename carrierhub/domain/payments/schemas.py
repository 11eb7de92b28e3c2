"""Payment domain schemas - Pydantic models for validation"""

from pydantic import BaseModel, field_validator


class PaymentOrderCreate(BaseModel):
    bookingId: int


class PaymentSessionCreate(BaseModel):
    bookingId: int


class PaymentVerify(BaseModel):
    """Fields returned by the checkout widget after a successful payment"""

    razorpay_payment_id: str
    razorpay_order_id: str
    razorpay_signature: str
    bookingId: int

    @field_validator("razorpay_payment_id", "razorpay_order_id", "razorpay_signature")
    @classmethod
    def require_value(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field is required")
        return v


class PaymentOrderResponse(BaseModel):
    orderId: str
    amount: int
    currency: str
    keyId: str
