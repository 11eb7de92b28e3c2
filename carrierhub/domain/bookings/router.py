"""Booking router - FastAPI endpoints for student bookings"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_student
from ...database import get_db
from ...models import Student
from ...schemas import booking_response, build_pagination, success_response
from .schemas import BookingCreate
from .service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bookings", tags=["Bookings"])


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


@router.post("", status_code=201)
async def create_booking(
    data: BookingCreate,
    current_student: Student = Depends(get_current_student),
    service: BookingService = Depends(get_booking_service),
):
    """Create a new consultation booking"""
    booking = service.create_booking(current_student, data)
    return success_response(
        "Booking created successfully",
        booking=booking_response(booking, include_student=True, include_payment=False),
    )


# /me must be declared before /{booking_id}
@router.get("/me")
async def get_my_bookings(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_student: Student = Depends(get_current_student),
    service: BookingService = Depends(get_booking_service),
):
    """Get the current student's bookings, newest first"""
    bookings, total = service.get_student_bookings(current_student, page, limit)
    return success_response(
        "Bookings retrieved successfully",
        bookings=[booking_response(b) for b in bookings],
        pagination=build_pagination(page, limit, total),
    )


@router.get("/{booking_id}")
async def get_booking(
    booking_id: int,
    current_student: Student = Depends(get_current_student),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.get_student_booking(current_student, booking_id)
    return success_response("Booking retrieved successfully", booking=booking_response(booking))
