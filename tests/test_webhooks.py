import json

import pytest

from carrierhub.config import WEBHOOK_RATE_LIMIT_PER_MINUTE
from carrierhub.rate_limiter import check_rate_limit

from .conftest import auth_header, sign

WEBHOOK_SECRET = "whsec_test"


def post_webhook(client, payload, signature=None, raw=None, extra_headers=None):
    body = raw if raw is not None else json.dumps(payload).encode()
    headers = {"Content-Type": "application/json", **(extra_headers or {})}
    sig = signature if signature is not None else sign(body.decode(), WEBHOOK_SECRET)
    if sig:
        headers["X-Razorpay-Signature"] = sig
    return client.post("/api/payments/webhook", content=body, headers=headers)


def payment_event(event, order_id, payment_id="pay_hook_1", amount=50000):
    return {
        "event": event,
        "payload": {
            "payment": {
                "entity": {"id": payment_id, "order_id": order_id, "amount": amount, "currency": "inr"}
            }
        },
    }


@pytest.fixture()
def ordered_booking(client, student_token, create_booking, fake_orders):
    booking = create_booking(student_token)
    resp = client.post("/api/payments/create", json={"bookingId": booking["id"]}, headers=auth_header(student_token))
    return booking, resp.json()["data"]["orderId"]


def booking_state(client, token, booking_id):
    return client.get(f"/api/bookings/{booking_id}", headers=auth_header(token)).json()["data"]["booking"]


def test_webhook_rejects_missing_or_bad_signature(client):
    payload = {"event": "payment.captured", "payload": {}}

    missing = post_webhook(client, payload, signature="")
    wrong = post_webhook(client, payload, signature="0" * 64)

    for resp in (missing, wrong):
        assert resp.status_code == 400
        assert resp.json()["error"] == "INVALID_SIGNATURE"


def test_webhook_rejects_invalid_json(client):
    resp = post_webhook(client, None, raw=b"{not json")
    assert resp.status_code == 400
    assert resp.json()["error"] == "INVALID_JSON"


def test_webhook_rejects_missing_event_or_payload(client):
    resp = post_webhook(client, {"event": "payment.captured"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "INVALID_PAYLOAD"


def test_payment_captured_records_payment(client, student_token, ordered_booking):
    booking, order_id = ordered_booking

    resp = post_webhook(client, payment_event("payment.captured", order_id))

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "Payment processed successfully"}
    state = booking_state(client, student_token, booking["id"])
    assert state["status"] == "SUCCESS"
    assert state["payment"]["razorpayPaymentId"] == "pay_hook_1"
    assert state["payment"]["currency"] == "INR"

    again = post_webhook(client, payment_event("payment.captured", order_id))
    assert again.json() == {"success": True, "message": "Payment already processed"}


def test_payment_captured_amount_mismatch(client, student_token, ordered_booking):
    booking, order_id = ordered_booking

    resp = post_webhook(client, payment_event("payment.captured", order_id, amount=100))

    assert resp.status_code == 200
    assert resp.json() == {"success": False, "message": "Amount mismatch detected"}
    state = booking_state(client, student_token, booking["id"])
    assert state["status"] == "PENDING"
    assert state["payment"] is None


def test_payment_captured_unknown_order(client):
    resp = post_webhook(client, payment_event("payment.captured", "order_unknown"))
    assert resp.status_code == 200
    assert resp.json() == {"success": False, "message": "Booking not found"}


@pytest.mark.parametrize(
    "event, status",
    [("payment.failed", "FAILED"), ("payment.authorized", "PROCESSING")],
)
def test_status_events_update_booking(client, student_token, ordered_booking, event, status):
    booking, order_id = ordered_booking

    resp = post_webhook(client, payment_event(event, order_id))

    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert booking_state(client, student_token, booking["id"])["status"] == status


def test_refund_processed(client, student_token, ordered_booking):
    booking, order_id = ordered_booking
    post_webhook(client, payment_event("payment.captured", order_id))

    refund = {
        "event": "refund.processed",
        "payload": {"refund": {"entity": {"id": "rfnd_1", "payment_id": "pay_hook_1", "amount": 50000}}},
    }
    resp = post_webhook(client, refund)

    assert resp.json() == {"success": True, "message": "Refund processed successfully"}
    state = booking_state(client, student_token, booking["id"])
    assert state["status"] == "FAILED"
    assert state["payment"]["status"] == "REFUNDED"


def test_refund_for_unknown_payment(client):
    refund = {"event": "refund.processed", "payload": {"refund": {"entity": {"payment_id": "pay_nope"}}}}
    resp = post_webhook(client, refund)
    assert resp.json() == {"success": False, "message": "Payment not found"}


def test_unhandled_event_is_acknowledged(client):
    resp = post_webhook(client, {"event": "order.paid", "payload": {"order": {}}})
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "Event order.paid acknowledged but not processed"}


def test_webhook_handler_error_returns_500(client, monkeypatch):
    from carrierhub.domain.payments.webhooks import WebhookProcessor

    def _boom(self, entity):
        raise RuntimeError("db exploded")

    monkeypatch.setattr(WebhookProcessor, "handle_payment_failed", _boom)

    resp = post_webhook(client, payment_event("payment.failed", "order_x"))

    assert resp.status_code == 500
    assert resp.json()["error"] == "WEBHOOK_ERROR"


def test_payment_captured_without_payment_id(client, student_token, ordered_booking):
    booking, order_id = ordered_booking
    event = payment_event("payment.captured", order_id)
    del event["payload"]["payment"]["entity"]["id"]

    resp = post_webhook(client, event)

    assert resp.status_code == 200
    assert resp.json() == {"success": False, "message": "Invalid payment entity"}
    state = booking_state(client, student_token, booking["id"])
    assert state["status"] == "PENDING"
    assert state["payment"] is None


def test_webhook_limit_is_shared_across_addresses(client):
    for _ in range(WEBHOOK_RATE_LIMIT_PER_MINUTE - 1):
        check_rate_limit("webhook_payments:global", WEBHOOK_RATE_LIMIT_PER_MINUTE, 60)
    event = {"event": "order.paid", "payload": {"order": {}}}

    first = post_webhook(client, event, extra_headers={"X-Forwarded-For": "10.0.0.1"})
    second = post_webhook(client, event, extra_headers={"X-Forwarded-For": "10.0.0.2"})

    assert first.status_code == 200
    assert second.status_code == 429
    assert second.json()["error"] == "RATE_LIMIT_EXCEEDED"
