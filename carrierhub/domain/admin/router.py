"""Admin router - FastAPI endpoints for booking administration"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_admin
from ...database import get_db
from ...models import Admin, BookingStatus, ConsultantType
from ...schemas import booking_response, build_pagination, success_response
from .schemas import BookingFilters, BookingStatusUpdate
from .service import AdminService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])


def get_admin_service(db: Session = Depends(get_db)) -> AdminService:
    """Dependency injection for AdminService"""
    return AdminService(db)


def booking_filters(
    status: Optional[BookingStatus] = Query(None),
    consultantType: Optional[ConsultantType] = Query(None),
    dateFrom: Optional[datetime] = Query(None),
    dateTo: Optional[datetime] = Query(None),
) -> BookingFilters:
    return BookingFilters(status=status, consultant_type=consultantType, date_from=dateFrom, date_to=dateTo)


# ============================================================================
# BOOKINGS
# ============================================================================


@router.get("/bookings")
async def get_all_bookings(
    filters: BookingFilters = Depends(booking_filters),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_admin: Admin = Depends(get_current_admin),
    service: AdminService = Depends(get_admin_service),
):
    """Get all bookings with optional filters"""
    bookings, total = service.list_bookings(filters, page, limit)
    return success_response(
        "Bookings retrieved successfully",
        bookings=[booking_response(b, include_student=True) for b in bookings],
        pagination=build_pagination(page, limit, total),
    )


# /bookings/export must be declared before any /bookings/{booking_id} route
@router.get("/bookings/export")
async def export_bookings(
    filters: BookingFilters = Depends(booking_filters),
    current_admin: Admin = Depends(get_current_admin),
    service: AdminService = Depends(get_admin_service),
):
    """Export bookings as CSV with optional filters"""
    return service.export_bookings_csv(current_admin, filters)


@router.patch("/bookings/{booking_id}/status")
async def update_booking_status(
    booking_id: int,
    data: BookingStatusUpdate,
    current_admin: Admin = Depends(get_current_admin),
    service: AdminService = Depends(get_admin_service),
):
    booking = service.update_booking_status(current_admin, booking_id, data.status)
    return success_response(
        "Booking status updated successfully", booking=booking_response(booking, include_student=True)
    )


# ============================================================================
# DASHBOARD
# ============================================================================


@router.get("/dashboard/stats")
async def get_dashboard_stats(
    current_admin: Admin = Depends(get_current_admin),
    service: AdminService = Depends(get_admin_service),
):
    """Get dashboard statistics"""
    return success_response(
        "Dashboard stats retrieved successfully", **service.dashboard_stats().model_dump(mode="json")
    )
