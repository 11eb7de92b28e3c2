"""Payment service - Checkout orders, signature verification and hosted payment sessions"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...config import PAYMENT_SESSION_TTL_SECONDS
from ...errors import api_error
from ...models import PAYABLE_BOOKING_STATUSES, Booking, BookingStatus, Payment, PaymentStatus, Student
from ...security_utils import (
    InvalidTokenError,
    TokenExpiredError,
    generate_payment_session_token,
    verify_payment_session_token,
)
from ..bookings.repository import BookingRepository
from .razorpay_service import PaymentGatewayError, razorpay_service
from .repository import PaymentRepository
from .schemas import PaymentOrderResponse, PaymentVerify

logger = logging.getLogger(__name__)


class PaymentPageError(Exception):
    """Failure that is rendered as an HTML page instead of a JSON envelope"""

    def __init__(self, status_code: int, title: str, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.title = title
        self.message = message


class PaymentService:
    """Service layer for payment operations"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PaymentRepository()
        self.bookings = BookingRepository()
        self.gateway = razorpay_service

    def _get_student_booking(self, student_id: int, booking_id: int) -> Booking:
        booking = self.bookings.get_student_booking(self.db, booking_id, student_id)
        if not booking:
            raise api_error(404, "Booking not found", "NOT_FOUND")
        return booking

    def _order_notes(self, booking: Booking) -> dict:
        notes = {"booking_id": booking.id, "student_id": booking.student_id}
        if booking.student:
            notes["student_name"] = booking.student.name
            notes["student_email"] = booking.student.email
        notes["consultant_type"] = booking.consultant_type.value
        if booking.created_at:
            notes["booking_created"] = booking.created_at.isoformat()
        return notes

    def ensure_order(self, booking: Booking) -> str:
        """Return the booking's gateway order id, creating the order on first use

        Raises:
            PaymentGatewayError: The gateway rejected or could not create the order
        """
        if booking.razorpay_order_id:
            return booking.razorpay_order_id

        order = self.gateway.create_order(
            booking.amount, booking.currency, str(booking.id), notes=self._order_notes(booking)
        )
        booking = self.bookings.update_booking(self.db, booking, razorpay_order_id=order["id"])
        logger.info(f"🧾 Order {order['id']} attached to booking {booking.id}")
        return booking.razorpay_order_id

    # ------------------------------------------------------------------
    # In-app checkout
    # ------------------------------------------------------------------

    def create_order(self, student: Student, booking_id: int) -> tuple[PaymentOrderResponse, str]:
        booking = self._get_student_booking(student.id, booking_id)

        if booking.status not in PAYABLE_BOOKING_STATUSES:
            raise api_error(
                400,
                f"Booking is not in a valid state for payment. Current status: {booking.status.value}",
                "INVALID_BOOKING_STATUS",
            )

        if booking.razorpay_order_id:
            message = "Payment order already exists"
            order_id = booking.razorpay_order_id
        else:
            message = "Payment order created successfully"
            try:
                order_id = self.ensure_order(booking)
            except PaymentGatewayError as e:
                raise api_error(502, "Failed to create payment order", "PAYMENT_GATEWAY_ERROR") from e

        return (
            PaymentOrderResponse(
                orderId=order_id,
                amount=booking.amount,
                currency=booking.currency,
                keyId=self.gateway.key_id or "",
            ),
            message,
        )

    def verify_payment(self, student: Student, data: PaymentVerify) -> tuple[Payment, str]:
        """Verify a checkout result and record the payment

        Replaying an already recorded payment id returns the stored payment.
        """
        booking = self._get_student_booking(student.id, data.bookingId)

        existing = self.repo.get_by_gateway_payment_id(self.db, data.razorpay_payment_id)
        if existing:
            if existing.booking_id != booking.id:
                logger.warning(
                    f"🚫 Payment {data.razorpay_payment_id} belongs to another booking, not {booking.id}"
                )
                raise api_error(404, "Payment not found", "NOT_FOUND")
            logger.info(f"🔁 Payment already verified: {data.razorpay_payment_id}")
            return existing, "Payment already verified"

        # Only the order issued for this booking can settle it
        if not booking.razorpay_order_id or booking.razorpay_order_id != data.razorpay_order_id:
            logger.warning(
                f"🚫 Order mismatch for booking {booking.id}: "
                f"expected {booking.razorpay_order_id}, got {data.razorpay_order_id}"
            )
            raise api_error(400, "Order ID does not match this booking", "ORDER_MISMATCH")

        if not self.gateway.verify_payment_signature(
            data.razorpay_order_id, data.razorpay_payment_id, data.razorpay_signature
        ):
            self.bookings.update_booking(self.db, booking, status=BookingStatus.FAILED)
            raise api_error(400, "Payment verification failed", "INVALID_SIGNATURE")

        payment = self.repo.create_payment(
            self.db,
            booking.id,
            razorpay_payment_id=data.razorpay_payment_id,
            razorpay_order_id=data.razorpay_order_id,
            razorpay_signature=data.razorpay_signature,
            amount=booking.amount,
            currency=booking.currency,
            status=PaymentStatus.SUCCESS,
        )
        booking.status = BookingStatus.SUCCESS
        self.db.commit()
        self.db.refresh(payment)

        logger.info(f"✅ Payment {payment.id} verified for booking {booking.id} ({booking.amount} paise)")
        return payment, "Payment verified successfully"

    # ------------------------------------------------------------------
    # Hosted payment page
    # ------------------------------------------------------------------

    def create_payment_session(self, student: Student, booking_id: int) -> dict:
        booking = self._get_student_booking(student.id, booking_id)
        token = generate_payment_session_token(booking.id, student.id)
        logger.info(f"🔗 Payment session created for booking {booking.id}")
        return {
            "paymentToken": token,
            "paymentUrl": f"/api/payments/web-payment?token={token}",
            "expiresIn": PAYMENT_SESSION_TTL_SECONDS,
        }

    def prepare_web_payment(self, token: Optional[str]) -> tuple[Booking, str]:
        """Resolve a payment session token to its booking and gateway order id

        Raises:
            PaymentPageError: For every failure the page should report to the user
        """
        if not token:
            raise PaymentPageError(400, "Payment Error", "Invalid payment session. Please try again from the app.")

        try:
            session = verify_payment_session_token(token, PAYMENT_SESSION_TTL_SECONDS)
        except TokenExpiredError:
            raise PaymentPageError(
                400, "Payment Session Expired", "This payment session has expired. Please try again from the app."
            ) from None
        except InvalidTokenError:
            raise PaymentPageError(
                400, "Payment Error", "Invalid payment session. Please try again from the app."
            ) from None

        booking = self.bookings.get_student_booking(self.db, int(session["bookingId"]), int(session["studentId"]))
        if not booking:
            raise PaymentPageError(404, "Payment Error", "Booking not found or access denied")

        if booking.status not in PAYABLE_BOOKING_STATUSES:
            raise PaymentPageError(
                400, "Payment Error", f"This booking cannot be paid. Current status: {booking.status.value}"
            )

        try:
            order_id = self.ensure_order(booking)
        except PaymentGatewayError as e:
            raise PaymentPageError(
                502, "Payment Error", "Unable to reach the payment gateway. Please try again later."
            ) from e

        return booking, order_id
