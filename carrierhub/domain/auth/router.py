"""Auth router - FastAPI endpoints for student and admin authentication"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_student
from ...database import get_db
from ...models import Student
from ...rate_limiter import auth_rate_limit
from ...schemas import admin_response, student_response, success_response
from .schemas import LoginRequest, StudentRegister
from .service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    """Dependency injection for AuthService"""
    return AuthService(db)


@router.post("/register", status_code=201, dependencies=[Depends(auth_rate_limit)])
async def register(data: StudentRegister, service: AuthService = Depends(get_auth_service)):
    """Register a new student"""
    student, token = service.register_student(data)
    return success_response(
        "Student registered successfully", student=student_response(student), token=token
    )


@router.post("/login", dependencies=[Depends(auth_rate_limit)])
async def login(data: LoginRequest, service: AuthService = Depends(get_auth_service)):
    """Student login"""
    student, token = service.login_student(data)
    return success_response(
        "Student logged in successfully", student=student_response(student), token=token
    )


@router.get("/me")
async def get_me(current_student: Student = Depends(get_current_student)):
    """Get current student profile"""
    return success_response(
        "Student profile retrieved successfully", student=student_response(current_student)
    )


@router.post("/admin/login", dependencies=[Depends(auth_rate_limit)])
async def admin_login(data: LoginRequest, service: AuthService = Depends(get_auth_service)):
    """Admin login"""
    admin, token = service.login_admin(data)
    return success_response("Admin logged in successfully", admin=admin_response(admin), token=token)
