import hashlib
import hmac
import os
import tempfile
from pathlib import Path

import pytest

# Configuration is read at import time, so the environment is set before carrierhub is imported
_TEST_DIR = Path(tempfile.mkdtemp(prefix="carrierhub-tests-"))
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DIR / 'test.db'}"
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RAZORPAY_KEY_ID"] = "rzp_test_key"
os.environ["RAZORPAY_KEY_SECRET"] = "rzp_test_secret"
os.environ["RAZORPAY_WEBHOOK_SECRET"] = "whsec_test"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"
for key in ("REDIS_URL", "REDIS_HOST"):
    os.environ.pop(key, None)

from fastapi.testclient import TestClient  # noqa: E402

from carrierhub.database import Base, SessionLocal, engine  # noqa: E402
from carrierhub.domain.auth.service import AuthService  # noqa: E402
from carrierhub.domain.payments.razorpay_service import razorpay_service  # noqa: E402
from carrierhub.main import app  # noqa: E402
from carrierhub.rate_limiter import reset_memory_cache  # noqa: E402

STUDENT_PASSWORD = "Password123"
ADMIN_EMAIL = "admin@carrierhub.com"
ADMIN_PASSWORD = "Admin@1234"

BOOKING_PAYLOAD = {
    "consultantType": "CAREER_GUIDANCE",
    "details": "I need help choosing between engineering and design.",
    "amount": 50000,
}


def sign(message: str, secret: str) -> str:
    return hmac.new(secret.encode(), message.encode(), hashlib.sha256).hexdigest()


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def client():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    reset_memory_cache()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def register_student(client):
    def _register(email="student@example.com", name="Test Student", phone="9876543210"):
        resp = client.post(
            "/api/auth/register",
            json={"name": name, "email": email, "phone": phone, "password": STUDENT_PASSWORD},
        )
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]["token"]

    return _register


@pytest.fixture()
def student_token(register_student):
    return register_student()


@pytest.fixture()
def admin_token(client):
    db = SessionLocal()
    try:
        AuthService(db).ensure_admin(ADMIN_EMAIL, ADMIN_PASSWORD, "Test Admin")
    finally:
        db.close()

    resp = client.post("/api/auth/admin/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]["token"]


@pytest.fixture()
def create_booking(client):
    def _create(token, **overrides):
        resp = client.post("/api/bookings", json={**BOOKING_PAYLOAD, **overrides}, headers=auth_header(token))
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]["booking"]

    return _create


@pytest.fixture()
def fake_orders(monkeypatch):
    """Replace the gateway's order endpoint; records every order request"""
    created = []

    def _create(data=None, **kwargs):
        order = {
            "id": f"order_test_{len(created) + 1}",
            "amount": data["amount"],
            "currency": data["currency"],
            "receipt": data["receipt"],
            "status": "created",
        }
        created.append({"request": data, "order": order})
        return order

    monkeypatch.setattr(razorpay_service.client.order, "create", _create)
    return created
