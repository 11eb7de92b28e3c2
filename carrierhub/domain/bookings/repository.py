"""Booking repository - Database operations for bookings"""

from typing import Optional

from sqlalchemy.orm import Query, Session, joinedload, selectinload

from ...models import Booking


def _with_relations(query: Query) -> Query:
    return query.options(joinedload(Booking.student), selectinload(Booking.payments))


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def create_booking(db: Session, student_id: int, **booking_data) -> Booking:
        booking = Booking(student_id=student_id, **booking_data)
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    @staticmethod
    def get_booking_by_id(db: Session, booking_id: int) -> Optional[Booking]:
        return _with_relations(db.query(Booking)).filter(Booking.id == booking_id).first()

    @staticmethod
    def get_student_booking(db: Session, booking_id: int, student_id: int) -> Optional[Booking]:
        """Get a booking only if it belongs to the given student"""
        return (
            _with_relations(db.query(Booking))
            .filter(Booking.id == booking_id, Booking.student_id == student_id)
            .first()
        )

    @staticmethod
    def get_booking_by_order_id(db: Session, order_id: str) -> Optional[Booking]:
        return _with_relations(db.query(Booking)).filter(Booking.razorpay_order_id == order_id).first()

    @staticmethod
    def list_student_bookings(
        db: Session, student_id: int, offset: int, limit: int
    ) -> tuple[list[Booking], int]:
        """Get one page of a student's bookings (newest first) and the total count"""
        query = db.query(Booking).filter(Booking.student_id == student_id)
        total = query.count()
        bookings = (
            _with_relations(query)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return bookings, total

    @staticmethod
    def update_booking(db: Session, booking: Booking, **updates) -> Booking:
        for key, value in updates.items():
            if hasattr(booking, key):
                setattr(booking, key, value)

        db.commit()
        db.refresh(booking)
        return booking
