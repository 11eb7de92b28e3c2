"""Razorpay webhook event processing

Each handler returns {"success": bool, "message": str}. Outcomes such as an
unknown booking are reported with success False but still acknowledged with
200 so the gateway stops retrying.
"""

import logging
from typing import Any, Callable

from sqlalchemy.orm import Session

from ...models import BookingStatus, PaymentStatus
from ..bookings.repository import BookingRepository
from .repository import PaymentRepository

logger = logging.getLogger(__name__)


def _entity(payload: dict, kind: str) -> dict:
    section = payload.get(kind) or {}
    entity = section.get("entity") if isinstance(section, dict) else None
    return entity if isinstance(entity, dict) else {}


class WebhookProcessor:
    """Apply verified webhook events to bookings and payments"""

    def __init__(self, db: Session):
        self.db = db
        self.bookings = BookingRepository()
        self.payments = PaymentRepository()
        self.handlers: dict[str, Callable[[dict], dict]] = {
            "payment.captured": self.handle_payment_captured,
            "payment.failed": self.handle_payment_failed,
            "payment.authorized": self.handle_payment_authorized,
            "refund.processed": self.handle_refund_processed,
        }

    def process(self, event: str, payload: dict[str, Any]) -> dict:
        handler = self.handlers.get(event)
        if handler is None:
            logger.info(f"ℹ️ Unhandled webhook event: {event}")
            return {"success": True, "message": f"Event {event} acknowledged but not processed"}

        kind = "refund" if event.startswith("refund.") else "payment"
        return handler(_entity(payload, kind))

    def handle_payment_captured(self, entity: dict) -> dict:
        order_id = entity.get("order_id")
        payment_id = entity.get("id")
        amount = entity.get("amount")
        logger.info(f"💰 payment.captured: order={order_id} payment={payment_id} amount={amount}")

        if not payment_id:
            logger.error(f"❌ payment.captured without a payment id (order {order_id})")
            return {"success": False, "message": "Invalid payment entity"}

        booking = self.bookings.get_booking_by_order_id(self.db, order_id) if order_id else None
        if not booking:
            logger.error(f"❌ Booking not found for order ID: {order_id}")
            return {"success": False, "message": "Booking not found"}

        if self.payments.get_by_gateway_payment_id(self.db, payment_id):
            logger.info(f"🔁 Payment already processed: {payment_id}")
            return {"success": True, "message": "Payment already processed"}

        if amount != booking.amount:
            logger.error(
                f"❌ Amount mismatch for order {order_id}: booking={booking.amount} payment={amount}"
            )
            return {"success": False, "message": "Amount mismatch detected"}

        self.payments.create_payment(
            self.db,
            booking.id,
            razorpay_payment_id=payment_id,
            razorpay_order_id=order_id,
            razorpay_signature="",
            amount=amount,
            currency=(entity.get("currency") or booking.currency).upper(),
            status=PaymentStatus.SUCCESS,
        )
        booking.status = BookingStatus.SUCCESS
        self.db.commit()

        logger.info(f"✅ Payment captured for booking {booking.id}")
        return {"success": True, "message": "Payment processed successfully"}

    def _set_booking_status(self, entity: dict, status: BookingStatus, message: str) -> dict:
        order_id = entity.get("order_id")
        booking = self.bookings.get_booking_by_order_id(self.db, order_id) if order_id else None
        if not booking:
            logger.error(f"❌ Booking not found for order ID: {order_id}")
            return {"success": False, "message": "Booking not found"}

        self.bookings.update_booking(self.db, booking, status=status)
        logger.info(f"🔄 Booking {booking.id} marked {status.value} (payment {entity.get('id')})")
        return {"success": True, "message": message}

    def handle_payment_failed(self, entity: dict) -> dict:
        return self._set_booking_status(entity, BookingStatus.FAILED, "Payment failure processed")

    def handle_payment_authorized(self, entity: dict) -> dict:
        return self._set_booking_status(entity, BookingStatus.PROCESSING, "Payment authorization processed")

    def handle_refund_processed(self, entity: dict) -> dict:
        payment_id = entity.get("payment_id")
        logger.info(f"↩️ refund.processed: refund={entity.get('id')} payment={payment_id}")

        payment = self.payments.get_by_gateway_payment_id(self.db, payment_id) if payment_id else None
        if not payment:
            logger.error(f"❌ Payment not found for payment ID: {payment_id}")
            return {"success": False, "message": "Payment not found"}

        payment.status = PaymentStatus.REFUNDED
        payment.booking.status = BookingStatus.FAILED
        self.db.commit()

        logger.info(f"✅ Refund processed for payment {payment.id}, booking {payment.booking_id}")
        return {"success": True, "message": "Refund processed successfully"}
