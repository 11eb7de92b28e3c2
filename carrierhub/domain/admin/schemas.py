"""Admin domain schemas"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel

from ...models import BookingStatus, ConsultantType


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


class CategoryStat(BaseModel):
    type: ConsultantType
    count: int


class DashboardStats(BaseModel):
    totalBookings: int
    pendingBookings: int
    successBookings: int
    completedBookings: int
    totalRevenue: int
    monthlyBookings: int
    categoryStats: list[CategoryStat]


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


@dataclass
class BookingFilters:
    """Filters shared by the admin listing and the CSV export"""

    status: Optional[BookingStatus] = None
    consultant_type: Optional[ConsultantType] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None

    def __post_init__(self):
        # created_at is stored as naive UTC
        self.date_from = _naive_utc(self.date_from)
        self.date_to = _naive_utc(self.date_to)
