import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .database import get_db
from .errors import api_error
from .models import Admin, Student
from .security_utils import InvalidTokenError, TokenExpiredError, decode_access_token

logger = logging.getLogger(__name__)

# auto_error=False so a missing header yields our 401 NO_TOKEN instead of FastAPI's default
security = HTTPBearer(auto_error=False)


def _decode_bearer(credentials: Optional[HTTPAuthorizationCredentials], expected_type: str) -> int:
    """Validate the bearer token and return the subject id it was issued for"""
    if not credentials or not credentials.credentials:
        raise api_error(401, "Access denied. No token provided.", "NO_TOKEN")

    try:
        payload = decode_access_token(credentials.credentials)
    except TokenExpiredError:
        raise api_error(401, "Token expired", "TOKEN_EXPIRED") from None
    except InvalidTokenError:
        raise api_error(401, "Invalid token", "INVALID_TOKEN") from None

    subject_id = payload.get("id")
    if payload.get("type") != expected_type or not isinstance(subject_id, int):
        logger.warning(f"⚠️ Token type mismatch: expected {expected_type}, got {payload.get('type')}")
        raise api_error(401, "Invalid token", "INVALID_TOKEN")

    return subject_id


async def get_current_student(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Student:
    """Get current student from bearer token"""
    student_id = _decode_bearer(credentials, "student")

    student = db.query(Student).filter(Student.id == student_id).first()
    if not student:
        raise api_error(401, "Invalid token. Student not found.", "INVALID_TOKEN")

    logger.debug(f"✅ Student authenticated: {student.email}")
    return student


async def get_current_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Admin:
    """Get current admin from bearer token"""
    admin_id = _decode_bearer(credentials, "admin")

    admin = db.query(Admin).filter(Admin.id == admin_id).first()
    if not admin:
        raise api_error(401, "Invalid token. Admin not found.", "INVALID_TOKEN")

    logger.debug(f"✅ Admin authenticated: {admin.email}")
    return admin
