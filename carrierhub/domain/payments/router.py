"""Payment router - FastAPI endpoints for checkout, verification, webhooks and the hosted payment page"""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse
from sqlalchemy.orm import Session

from ...auth import get_current_student
from ...database import get_db
from ...errors import api_error, error_body
from ...models import Student
from ...rate_limiter import webhook_rate_limit
from ...schemas import payment_response, success_response
from .payment_page import render_checkout_page, render_message_page
from .razorpay_service import razorpay_service
from .schemas import PaymentOrderCreate, PaymentSessionCreate, PaymentVerify
from .service import PaymentPageError, PaymentService
from .webhooks import WebhookProcessor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payments", tags=["Payments"])


def get_payment_service(db: Session = Depends(get_db)) -> PaymentService:
    """Dependency injection for PaymentService"""
    return PaymentService(db)


# ============================================================================
# IN-APP CHECKOUT
# ============================================================================


@router.get("/key")
async def get_key():
    """Public key id for the checkout widget"""
    return success_response("Razorpay key retrieved successfully", keyId=razorpay_service.key_id)


@router.post("/create")
async def create_payment_order(
    data: PaymentOrderCreate,
    current_student: Student = Depends(get_current_student),
    service: PaymentService = Depends(get_payment_service),
):
    """Create (or reuse) the gateway order for a booking"""
    order, message = service.create_order(current_student, data.bookingId)
    return success_response(message, **order.model_dump())


@router.post("/verify")
async def verify_payment(
    data: PaymentVerify,
    current_student: Student = Depends(get_current_student),
    service: PaymentService = Depends(get_payment_service),
):
    payment, message = service.verify_payment(current_student, data)
    return success_response(message, payment=payment_response(payment))


# ============================================================================
# WEBHOOK
# ============================================================================


@router.post("/webhook", dependencies=[Depends(webhook_rate_limit)])
async def handle_razorpay_webhook(request: Request, db: Session = Depends(get_db)):
    """
    Handle Razorpay webhook events

    The signature covers the raw body, so it is verified before any parsing.
    """
    body = await request.body()
    signature = request.headers.get("x-razorpay-signature")
    logger.info(f"📨 Webhook received (signature {'present' if signature else 'missing'}, {len(body)} bytes)")

    try:
        body_text = body.decode("utf-8")
    except UnicodeDecodeError:
        raise api_error(400, "Invalid webhook payload", "INVALID_JSON") from None

    if not razorpay_service.verify_webhook_signature(body_text, signature):
        raise api_error(400, "Invalid webhook signature", "INVALID_SIGNATURE")

    try:
        data = json.loads(body_text)
    except json.JSONDecodeError:
        raise api_error(400, "Invalid JSON in webhook body", "INVALID_JSON") from None

    event = data.get("event") if isinstance(data, dict) else None
    payload = data.get("payload") if isinstance(data, dict) else None
    if not event or not isinstance(payload, dict):
        raise api_error(400, "Invalid webhook payload", "INVALID_PAYLOAD")

    try:
        result = WebhookProcessor(db).process(event, payload)
    except Exception as e:
        db.rollback()
        logger.exception(f"❌ Webhook processing error for {event}: {e}")
        return JSONResponse(status_code=500, content=error_body("Webhook processing failed", "WEBHOOK_ERROR"))

    logger.info(f"✅ Webhook {event} handled: {result['message']}")
    return result


# ============================================================================
# HOSTED PAYMENT PAGE
# ============================================================================


@router.post("/create-payment-session")
async def create_payment_session(
    data: PaymentSessionCreate,
    current_student: Student = Depends(get_current_student),
    service: PaymentService = Depends(get_payment_service),
):
    """Issue a short-lived link that opens the checkout in a browser"""
    session = service.create_payment_session(current_student, data.bookingId)
    return success_response("Payment session created successfully", **session)


@router.get("/web-payment", response_class=HTMLResponse)
async def web_payment(
    token: Optional[str] = Query(None),
    service: PaymentService = Depends(get_payment_service),
):
    try:
        booking, order_id = service.prepare_web_payment(token)
        return render_checkout_page(
            key_id=razorpay_service.key_id or "",
            order_id=order_id,
            booking_id=booking.id,
            amount=booking.amount,
            currency=booking.currency,
            student_name=booking.student.name,
            student_email=booking.student.email,
        )
    except PaymentPageError as e:
        logger.warning(f"⚠️ Web payment page error ({e.status_code}): {e.message}")
        return render_message_page(e.status_code, e.title, e.message)
    except Exception as e:
        logger.exception(f"❌ Web payment page failed: {e}")
        return render_message_page(500, "Payment Error", "Something went wrong. Please try again from the app.")
