"""Booking service - Business logic for student bookings"""

import logging

from sqlalchemy.orm import Session

from ...config import DEFAULT_CURRENCY
from ...errors import api_error
from ...models import Booking, BookingStatus, Student
from .repository import BookingRepository
from .schemas import BookingCreate

logger = logging.getLogger(__name__)


class BookingService:
    """Service layer for booking operations"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BookingRepository()

    def create_booking(self, student: Student, data: BookingCreate) -> Booking:
        booking = self.repo.create_booking(
            self.db,
            student.id,
            consultant_type=data.consultantType,
            details=data.details,
            amount=data.amount,
            currency=DEFAULT_CURRENCY,
            status=BookingStatus.PENDING,
        )
        logger.info(
            f"📝 Booking {booking.id} created by student {student.id} "
            f"({booking.consultant_type.value}, {booking.amount} paise)"
        )
        return booking

    def get_student_bookings(self, student: Student, page: int, limit: int) -> tuple[list[Booking], int]:
        return self.repo.list_student_bookings(self.db, student.id, (page - 1) * limit, limit)

    def get_student_booking(self, student: Student, booking_id: int) -> Booking:
        """Get a booking owned by the student; someone else's booking is reported as missing"""
        booking = self.repo.get_student_booking(self.db, booking_id, student.id)
        if not booking:
            raise api_error(404, "Booking not found", "NOT_FOUND")
        return booking
