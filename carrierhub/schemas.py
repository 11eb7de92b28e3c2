"""Shared response schemas used across domains"""

import math
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel

from .models import Admin, Booking, BookingStatus, ConsultantType, Payment, PaymentStatus, Student


class StudentResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    createdAt: Optional[datetime] = None


class AdminResponse(BaseModel):
    id: int
    name: str
    email: str
    createdAt: Optional[datetime] = None


class PaymentResponse(BaseModel):
    id: int
    bookingId: int
    razorpayPaymentId: str
    razorpayOrderId: Optional[str] = None
    amount: int
    currency: str
    status: PaymentStatus
    createdAt: Optional[datetime] = None


class BookingResponse(BaseModel):
    id: int
    studentId: int
    consultantType: ConsultantType
    details: str
    amount: int
    currency: str
    status: BookingStatus
    razorpayOrderId: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None
    student: Optional[StudentResponse] = None
    payment: Optional[PaymentResponse] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


def student_response(student: Student) -> StudentResponse:
    return StudentResponse(
        id=student.id,
        name=student.name,
        email=student.email,
        phone=student.phone,
        createdAt=student.created_at,
    )


def admin_response(admin: Admin) -> AdminResponse:
    return AdminResponse(id=admin.id, name=admin.name, email=admin.email, createdAt=admin.created_at)


def payment_response(payment: Payment) -> PaymentResponse:
    return PaymentResponse(
        id=payment.id,
        bookingId=payment.booking_id,
        razorpayPaymentId=payment.razorpay_payment_id,
        razorpayOrderId=payment.razorpay_order_id,
        amount=payment.amount,
        currency=payment.currency,
        status=payment.status,
        createdAt=payment.created_at,
    )


def booking_response(
    booking: Booking, include_student: bool = False, include_payment: bool = True
) -> BookingResponse:
    """Build the API view of a booking, optionally embedding its student and latest payment"""
    payment = booking.payment if include_payment else None
    return BookingResponse(
        id=booking.id,
        studentId=booking.student_id,
        consultantType=booking.consultant_type,
        details=booking.details,
        amount=booking.amount,
        currency=booking.currency,
        status=booking.status,
        razorpayOrderId=booking.razorpay_order_id,
        createdAt=booking.created_at,
        updatedAt=booking.updated_at,
        student=student_response(booking.student) if include_student and booking.student else None,
        payment=payment_response(payment) if payment else None,
    )


def build_pagination(page: int, limit: int, total: int) -> Pagination:
    return Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit) if limit else 0)


def success_response(message: str, **data: Any) -> dict:
    """Standard success envelope"""
    return {"success": True, "message": message, "data": data}
