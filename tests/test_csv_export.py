import csv
import io
from datetime import datetime
from types import SimpleNamespace

from carrierhub.models import BookingStatus, ConsultantType, PaymentStatus
from carrierhub.utils.csv_export import CSV_HEADERS, build_bookings_csv, format_rupees


def make_booking(payment=None):
    return SimpleNamespace(
        id=7,
        student=SimpleNamespace(name="Meera", email="meera@example.com", phone="9876543210"),
        consultant_type=ConsultantType.EXAM_PREPARATION,
        details="Line one\nline two",
        amount=100000,
        status=BookingStatus.SUCCESS,
        payment=payment,
        created_at=datetime(2024, 5, 1, 10, 30),
        updated_at=datetime(2024, 5, 2, 8, 0),
    )


def test_format_rupees():
    assert format_rupees(1000) == "10.00"
    assert format_rupees(123456) == "1234.56"
    assert format_rupees(5) == "0.05"


def test_build_bookings_csv_with_payment():
    payment = SimpleNamespace(razorpay_payment_id="pay_123", status=PaymentStatus.SUCCESS)

    rows = list(csv.reader(io.StringIO(build_bookings_csv([make_booking(payment)]))))

    assert rows[0] == CSV_HEADERS
    assert rows[1] == [
        "7",
        "Meera",
        "meera@example.com",
        "9876543210",
        "EXAM_PREPARATION",
        "Line one\nline two",
        "1000.00",
        "SUCCESS",
        "pay_123",
        "SUCCESS",
        "2024-05-01T10:30:00",
        "2024-05-02T08:00:00",
    ]


def test_build_bookings_csv_empty():
    rows = list(csv.reader(io.StringIO(build_bookings_csv([]))))
    assert rows == [CSV_HEADERS]
