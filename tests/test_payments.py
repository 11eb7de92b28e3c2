import pytest
from razorpay.errors import ServerError

from carrierhub.domain.payments.razorpay_service import razorpay_service

from .conftest import auth_header, sign

KEY_SECRET = "rzp_test_secret"


def verify_body(booking_id, order_id, payment_id="pay_test_1", signature=None):
    return {
        "razorpay_payment_id": payment_id,
        "razorpay_order_id": order_id,
        "razorpay_signature": signature or sign(f"{order_id}|{payment_id}", KEY_SECRET),
        "bookingId": booking_id,
    }


@pytest.fixture()
def ordered_booking(client, student_token, create_booking, fake_orders):
    booking = create_booking(student_token)
    resp = client.post("/api/payments/create", json={"bookingId": booking["id"]}, headers=auth_header(student_token))
    assert resp.status_code == 200, resp.text
    return booking, resp.json()["data"]["orderId"]


def test_get_key_is_public(client):
    resp = client.get("/api/payments/key")
    assert resp.status_code == 200
    assert resp.json()["data"] == {"keyId": "rzp_test_key"}


def test_create_order(client, student_token, create_booking, fake_orders):
    booking = create_booking(student_token)

    resp = client.post("/api/payments/create", json={"bookingId": booking["id"]}, headers=auth_header(student_token))

    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Payment order created successfully"
    assert body["data"] == {"orderId": "order_test_1", "amount": 50000, "currency": "INR", "keyId": "rzp_test_key"}

    request = fake_orders[0]["request"]
    assert request["amount"] == 50000
    assert request["currency"] == "INR"
    assert request["receipt"] == str(booking["id"])
    assert request["payment_capture"] == 1
    assert request["notes"]["booking_id"] == booking["id"]
    assert request["notes"]["student_email"] == "student@example.com"
    assert request["notes"]["consultant_type"] == "CAREER_GUIDANCE"


def test_create_order_reuses_existing_order(client, student_token, ordered_booking, fake_orders):
    booking, order_id = ordered_booking

    resp = client.post("/api/payments/create", json={"bookingId": booking["id"]}, headers=auth_header(student_token))

    assert resp.json()["message"] == "Payment order already exists"
    assert resp.json()["data"]["orderId"] == order_id
    assert len(fake_orders) == 1


def test_create_order_for_other_students_booking(client, register_student, create_booking, fake_orders):
    alice = register_student(email="alice@example.com")
    bob = register_student(email="bob@example.com", phone="9876500000")
    booking = create_booking(alice)

    resp = client.post("/api/payments/create", json={"bookingId": booking["id"]}, headers=auth_header(bob))

    assert resp.status_code == 404
    assert fake_orders == []


def test_create_order_rejects_non_payable_status(client, student_token, admin_token, create_booking, fake_orders):
    booking = create_booking(student_token)
    client.patch(
        f"/api/admin/bookings/{booking['id']}/status", json={"status": "COMPLETED"}, headers=auth_header(admin_token)
    )

    resp = client.post("/api/payments/create", json={"bookingId": booking["id"]}, headers=auth_header(student_token))

    assert resp.status_code == 400
    assert resp.json()["error"] == "INVALID_BOOKING_STATUS"


def test_create_order_gateway_failure(client, student_token, create_booking, monkeypatch):
    def _fail(data=None, **kwargs):
        raise ServerError("gateway down")

    monkeypatch.setattr(razorpay_service.client.order, "create", _fail)
    booking = create_booking(student_token)

    resp = client.post("/api/payments/create", json={"bookingId": booking["id"]}, headers=auth_header(student_token))

    assert resp.status_code == 502
    assert resp.json()["error"] == "PAYMENT_GATEWAY_ERROR"
    stored = client.get(f"/api/bookings/{booking['id']}", headers=auth_header(student_token)).json()
    assert stored["data"]["booking"]["razorpayOrderId"] is None


def test_verify_payment_success_and_replay(client, student_token, ordered_booking):
    booking, order_id = ordered_booking
    headers = auth_header(student_token)

    resp = client.post("/api/payments/verify", json=verify_body(booking["id"], order_id), headers=headers)

    assert resp.status_code == 200
    assert resp.json()["message"] == "Payment verified successfully"
    payment = resp.json()["data"]["payment"]
    assert payment["status"] == "SUCCESS"
    assert payment["amount"] == 50000
    assert payment["razorpayPaymentId"] == "pay_test_1"

    stored = client.get(f"/api/bookings/{booking['id']}", headers=headers).json()["data"]["booking"]
    assert stored["status"] == "SUCCESS"
    assert stored["payment"]["id"] == payment["id"]

    replay = client.post("/api/payments/verify", json=verify_body(booking["id"], order_id), headers=headers)
    assert replay.status_code == 200
    assert replay.json()["message"] == "Payment already verified"
    assert replay.json()["data"]["payment"]["id"] == payment["id"]


def test_verify_payment_bad_signature_fails_booking(client, student_token, ordered_booking):
    booking, order_id = ordered_booking
    headers = auth_header(student_token)

    resp = client.post(
        "/api/payments/verify", json=verify_body(booking["id"], order_id, signature="deadbeef"), headers=headers
    )

    assert resp.status_code == 400
    assert resp.json()["error"] == "INVALID_SIGNATURE"
    stored = client.get(f"/api/bookings/{booking['id']}", headers=headers).json()["data"]["booking"]
    assert stored["status"] == "FAILED"
    assert stored["payment"] is None


def test_verify_payment_order_mismatch(client, student_token, ordered_booking):
    booking, _ = ordered_booking

    resp = client.post(
        "/api/payments/verify", json=verify_body(booking["id"], "order_other"), headers=auth_header(student_token)
    )

    assert resp.status_code == 400
    assert resp.json()["error"] == "ORDER_MISMATCH"


def test_verify_payment_missing_fields(client, student_token):
    resp = client.post(
        "/api/payments/verify",
        json={"razorpay_payment_id": "", "razorpay_order_id": "order_1", "bookingId": 1},
        headers=auth_header(student_token),
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "VALIDATION_ERROR"


def test_failed_booking_can_be_paid_again(client, student_token, ordered_booking):
    booking, order_id = ordered_booking
    headers = auth_header(student_token)
    client.post("/api/payments/verify", json=verify_body(booking["id"], order_id, signature="bad"), headers=headers)

    again = client.post("/api/payments/create", json={"bookingId": booking["id"]}, headers=headers)
    assert again.status_code == 200
    assert again.json()["data"]["orderId"] == order_id

    resp = client.post("/api/payments/verify", json=verify_body(booking["id"], order_id, "pay_retry"), headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["payment"]["razorpayPaymentId"] == "pay_retry"


def test_dashboard_revenue_counts_successful_payments(client, admin_token, student_token, ordered_booking):
    booking, order_id = ordered_booking
    client.post("/api/payments/verify", json=verify_body(booking["id"], order_id), headers=auth_header(student_token))

    stats = client.get("/api/admin/dashboard/stats", headers=auth_header(admin_token)).json()["data"]

    assert stats["totalRevenue"] == 50000
    assert stats["successBookings"] == 1


def test_verify_payment_requires_this_bookings_order(client, student_token, create_booking, fake_orders):
    headers = auth_header(student_token)
    cheap = create_booking(student_token, amount=1000)
    pricey = create_booking(student_token, amount=500000)
    order = client.post("/api/payments/create", json={"bookingId": cheap["id"]}, headers=headers)
    order_id = order.json()["data"]["orderId"]

    # genuine signature for the cheap order, submitted against the booking that has no order
    resp = client.post("/api/payments/verify", json=verify_body(pricey["id"], order_id, "pay_cheap"), headers=headers)

    assert resp.status_code == 400
    assert resp.json()["error"] == "ORDER_MISMATCH"
    stored = client.get(f"/api/bookings/{pricey['id']}", headers=headers).json()["data"]["booking"]
    assert stored["status"] == "PENDING"
    assert stored["payment"] is None


def test_verify_payment_replay_scoped_to_booking(client, register_student, create_booking, fake_orders):
    alice = register_student(email="alice@example.com")
    bob = register_student(email="bob@example.com", phone="9876500000")
    alice_booking = create_booking(alice)
    bob_booking = create_booking(bob)
    alice_order = client.post(
        "/api/payments/create", json={"bookingId": alice_booking["id"]}, headers=auth_header(alice)
    ).json()["data"]["orderId"]
    paid = client.post(
        "/api/payments/verify", json=verify_body(alice_booking["id"], alice_order, "pay_alice"), headers=auth_header(alice)
    )
    assert paid.status_code == 200

    resp = client.post(
        "/api/payments/verify",
        json=verify_body(bob_booking["id"], "order_garbage", "pay_alice", signature="garbage"),
        headers=auth_header(bob),
    )

    assert resp.status_code == 404
    assert resp.json()["error"] == "NOT_FOUND"
    assert "data" not in resp.json()
