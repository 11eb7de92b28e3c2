"""CSV rendering for admin booking exports"""

import csv
from datetime import datetime
from io import StringIO
from typing import Iterable, Optional

from ..models import Booking

CSV_HEADERS = [
    "Booking ID",
    "Student Name",
    "Student Email",
    "Student Phone",
    "Consultant Type",
    "Details",
    "Amount (₹)",
    "Status",
    "Payment ID",
    "Payment Status",
    "Created At",
    "Updated At",
]


def format_rupees(amount_paise: int) -> str:
    return f"{amount_paise / 100:.2f}"


def _iso(value: Optional[datetime]) -> str:
    return value.isoformat() if value else ""


def build_bookings_csv(bookings: Iterable[Booking]) -> str:
    """Render bookings (with student and latest payment loaded) as CSV text"""
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(CSV_HEADERS)

    for booking in bookings:
        student = booking.student
        payment = booking.payment
        writer.writerow(
            [
                booking.id,
                student.name if student else "",
                student.email if student else "",
                student.phone if student else "",
                booking.consultant_type.value,
                booking.details,
                format_rupees(booking.amount),
                booking.status.value,
                payment.razorpay_payment_id if payment else "N/A",
                payment.status.value if payment else "N/A",
                _iso(booking.created_at),
                _iso(booking.updated_at),
            ]
        )

    return output.getvalue()
