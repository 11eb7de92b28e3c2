"""Payment repository - Database operations for payments"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Payment


class PaymentRepository:
    """Repository for payment database operations"""

    @staticmethod
    def get_by_gateway_payment_id(db: Session, razorpay_payment_id: str) -> Optional[Payment]:
        return (
            db.query(Payment)
            .options(joinedload(Payment.booking))
            .filter(Payment.razorpay_payment_id == razorpay_payment_id)
            .first()
        )

    @staticmethod
    def create_payment(db: Session, booking_id: int, **payment_data) -> Payment:
        """Insert a payment without committing; callers commit with the booking update"""
        payment = Payment(booking_id=booking_id, **payment_data)
        db.add(payment)
        db.flush()
        return payment
