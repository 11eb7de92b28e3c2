"""Admin service - Booking management, export and dashboard statistics"""

import logging
from datetime import datetime, timezone

from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from ...errors import api_error
from ...models import Admin, Booking, BookingStatus
from ...utils.csv_export import build_bookings_csv
from ..bookings.repository import BookingRepository
from .repository import AdminRepository
from .schemas import BookingFilters, CategoryStat, DashboardStats

logger = logging.getLogger(__name__)


class AdminService:
    """Service layer for admin operations"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AdminRepository()
        self.bookings = BookingRepository()

    def list_bookings(self, filters: BookingFilters, page: int, limit: int) -> tuple[list[Booking], int]:
        return self.repo.list_bookings(self.db, filters, offset=(page - 1) * limit, limit=limit)

    def update_booking_status(self, admin: Admin, booking_id: int, status: BookingStatus) -> Booking:
        booking = self.bookings.get_booking_by_id(self.db, booking_id)
        if not booking:
            raise api_error(404, "Booking not found", "NOT_FOUND")

        previous = booking.status
        booking = self.bookings.update_booking(self.db, booking, status=status)
        logger.info(f"🔄 Admin {admin.id} changed booking {booking.id} status {previous.value} -> {status.value}")
        return booking

    def export_bookings_csv(self, admin: Admin, filters: BookingFilters) -> StreamingResponse:
        """Export filtered bookings as a CSV attachment"""
        logger.info(f"📊 CSV Export requested by admin {admin.id} ({admin.email})")
        bookings, total = self.repo.list_bookings(self.db, filters)

        filename = f"bookings-export-{datetime.now(timezone.utc).strftime('%Y-%m-%d')}.csv"
        logger.info(f"✅ CSV export successful: {filename} ({total} bookings)")

        return StreamingResponse(
            iter([build_bookings_csv(bookings)]),
            media_type="text/csv",
            headers={
                "Content-Disposition": f"attachment; filename=\"{filename}\"",
                "Cache-Control": "no-cache",
            },
        )

    def dashboard_stats(self) -> DashboardStats:
        month_start = datetime.now(timezone.utc).replace(
            day=1, hour=0, minute=0, second=0, microsecond=0, tzinfo=None
        )

        return DashboardStats(
            totalBookings=self.repo.count_bookings(self.db),
            pendingBookings=self.repo.count_bookings(self.db, status=BookingStatus.PENDING),
            successBookings=self.repo.count_bookings(self.db, status=BookingStatus.SUCCESS),
            completedBookings=self.repo.count_bookings(self.db, status=BookingStatus.COMPLETED),
            totalRevenue=self.repo.total_revenue(self.db),
            monthlyBookings=self.repo.count_bookings(self.db, since=month_start),
            categoryStats=[
                CategoryStat(type=consultant_type, count=count)
                for consultant_type, count in self.repo.category_counts(self.db)
            ],
        )
