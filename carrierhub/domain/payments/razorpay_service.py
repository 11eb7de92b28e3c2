"""Razorpay service - Integration with the Razorpay payment gateway"""

import logging
from datetime import datetime, timezone
from typing import Optional

import razorpay
from razorpay.errors import SignatureVerificationError

from ...config import RAZORPAY_KEY_ID, RAZORPAY_KEY_SECRET, RAZORPAY_WEBHOOK_SECRET

logger = logging.getLogger(__name__)


class PaymentGatewayError(Exception):
    """Raised when the gateway cannot create an order"""


class RazorpayService:
    """Service for Razorpay API operations"""

    def __init__(self):
        self.key_id = RAZORPAY_KEY_ID
        self.key_secret = RAZORPAY_KEY_SECRET
        self.webhook_secret = RAZORPAY_WEBHOOK_SECRET
        self.client = None

        if not self.key_id or not self.key_secret:
            logger.warning("RAZORPAY_KEY_ID/RAZORPAY_KEY_SECRET not set; payment endpoints will fail until configured")
        else:
            try:
                self.client = razorpay.Client(auth=(self.key_id, self.key_secret))
                logger.info("Razorpay client initialized")
            except Exception as e:
                logger.error(f"Failed to initialize Razorpay client: {e}")
                self.client = None

    def is_available(self) -> bool:
        """Check if the Razorpay client is available"""
        return self.client is not None

    def create_order(
        self,
        amount: int,
        currency: str,
        receipt: str,
        notes: Optional[dict] = None,
    ) -> dict:
        """
        Create an auto-captured order

        Args:
            amount: Amount in paise
            currency: ISO currency code
            receipt: Merchant receipt reference (the booking id)
            notes: Extra key/value metadata stored on the order
        """
        if not self.client:
            raise PaymentGatewayError("Razorpay client not initialized")

        order_data = {
            "amount": int(amount),
            "currency": currency.upper(),
            "receipt": str(receipt),
            "payment_capture": 1,
            "notes": {"created_at": datetime.now(timezone.utc).isoformat(), **(notes or {})},
        }
        logger.info(
            f"💳 Creating Razorpay order: amount={order_data['amount']} "
            f"currency={order_data['currency']} receipt={order_data['receipt']}"
        )

        try:
            order = self.client.order.create(data=order_data)
        except Exception as e:
            logger.error(f"Failed to create Razorpay order for receipt {receipt}: {e}")
            raise PaymentGatewayError(f"Failed to create Razorpay order: {e}") from e

        logger.info(f"✅ Razorpay order created: {order.get('id')} ({order.get('status')})")
        return order

    def verify_payment_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        """Check the checkout signature (HMAC-SHA256 of order_id|payment_id)"""
        if not self.client or not (order_id and payment_id and signature):
            return False

        try:
            self.client.utility.verify_payment_signature(
                {
                    "razorpay_order_id": order_id,
                    "razorpay_payment_id": payment_id,
                    "razorpay_signature": signature,
                }
            )
        except SignatureVerificationError:
            logger.warning(f"🚫 Payment signature mismatch for order {order_id}, payment {payment_id}")
            return False
        return True

    def verify_webhook_signature(self, body: str, signature: Optional[str]) -> bool:
        """Check the X-Razorpay-Signature header against the raw request body"""
        if not self.webhook_secret:
            logger.error("RAZORPAY_WEBHOOK_SECRET is not configured")
            return False
        if not signature:
            logger.warning("No signature provided for webhook verification")
            return False

        try:
            # Webhook checks only need the webhook secret, not API credentials
            client = self.client or razorpay.Client()
            client.utility.verify_webhook_signature(body, signature, self.webhook_secret)
        except SignatureVerificationError:
            logger.warning(f"🚫 Webhook signature mismatch (body length {len(body)})")
            return False
        return True


# Global service instance
razorpay_service = RazorpayService()
