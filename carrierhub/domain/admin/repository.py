"""Admin repository - Cross-student booking queries and statistics"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Query, Session, joinedload, selectinload

from ...models import Booking, BookingStatus, Payment, PaymentStatus
from .schemas import BookingFilters


class AdminRepository:
    """Repository for admin booking operations"""

    @staticmethod
    def _filtered(db: Session, filters: BookingFilters) -> Query:
        query = db.query(Booking)
        if filters.status:
            query = query.filter(Booking.status == filters.status)
        if filters.consultant_type:
            query = query.filter(Booking.consultant_type == filters.consultant_type)
        if filters.date_from:
            query = query.filter(Booking.created_at >= filters.date_from)
        if filters.date_to:
            query = query.filter(Booking.created_at <= filters.date_to)
        return query

    @staticmethod
    def list_bookings(
        db: Session, filters: BookingFilters, offset: Optional[int] = None, limit: Optional[int] = None
    ) -> tuple[list[Booking], int]:
        """Get filtered bookings newest first; without a limit every match is returned"""
        query = AdminRepository._filtered(db, filters)
        total = query.count()

        query = query.options(joinedload(Booking.student), selectinload(Booking.payments)).order_by(
            Booking.created_at.desc(), Booking.id.desc()
        )
        if offset is not None:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)

        return query.all(), total

    @staticmethod
    def count_bookings(db: Session, status: Optional[BookingStatus] = None, since: Optional[datetime] = None) -> int:
        query = db.query(func.count(Booking.id))
        if status:
            query = query.filter(Booking.status == status)
        if since:
            query = query.filter(Booking.created_at >= since)
        return query.scalar() or 0

    @staticmethod
    def total_revenue(db: Session) -> int:
        return (
            db.query(func.sum(Payment.amount)).filter(Payment.status == PaymentStatus.SUCCESS).scalar() or 0
        )

    @staticmethod
    def category_counts(db: Session) -> list[tuple]:
        count = func.count(Booking.id)
        return (
            db.query(Booking.consultant_type, count)
            .group_by(Booking.consultant_type)
            .order_by(count.desc())
            .all()
        )
