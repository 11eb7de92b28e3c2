import enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class ConsultantType(str, enum.Enum):
    CAREER_GUIDANCE = "CAREER_GUIDANCE"
    COLLEGE_COURSE = "COLLEGE_COURSE"
    EXAM_PREPARATION = "EXAM_PREPARATION"
    STUDY_ABROAD = "STUDY_ABROAD"
    SKILL_MENTORSHIP = "SKILL_MENTORSHIP"
    JOB_PLACEMENT = "JOB_PLACEMENT"
    GOVERNMENT_JOBS = "GOVERNMENT_JOBS"
    PERSONAL_GROWTH = "PERSONAL_GROWTH"
    ALTERNATIVE_CAREERS = "ALTERNATIVE_CAREERS"


class BookingStatus(str, enum.Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    COMPLETED = "COMPLETED"


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


# Statuses from which a booking may (re)start the checkout flow
PAYABLE_BOOKING_STATUSES = (BookingStatus.PENDING, BookingStatus.FAILED)


class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(20), nullable=False)
    password = Column(String(255), nullable=False)  # bcrypt hash
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    bookings = relationship("Booking", back_populates="student", cascade="all, delete-orphan")


class Admin(Base):
    __tablename__ = "admins"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)  # bcrypt hash
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    consultant_type = Column(SAEnum(ConsultantType, native_enum=False, length=40), nullable=False, index=True)
    details = Column(Text, nullable=False)
    amount = Column(Integer, nullable=False)  # paise
    currency = Column(String(3), default="INR", nullable=False)
    status = Column(
        SAEnum(BookingStatus, native_enum=False, length=20),
        default=BookingStatus.PENDING,
        nullable=False,
        index=True,
    )
    razorpay_order_id = Column(String(255), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    student = relationship("Student", back_populates="bookings")
    payments = relationship(
        "Payment",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="Payment.id.desc()",
    )

    @property
    def payment(self):
        """Most recent payment recorded against this booking, if any"""
        return self.payments[0] if self.payments else None


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    razorpay_payment_id = Column(String(255), unique=True, index=True, nullable=False)
    razorpay_order_id = Column(String(255), nullable=False)
    razorpay_signature = Column(String(255), default="", nullable=False)  # empty when captured via webhook
    amount = Column(Integer, nullable=False)  # paise
    currency = Column(String(3), default="INR", nullable=False)
    status = Column(
        SAEnum(PaymentStatus, native_enum=False, length=20),
        default=PaymentStatus.PENDING,
        nullable=False,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    booking = relationship("Booking", back_populates="payments")
