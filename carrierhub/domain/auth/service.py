"""Auth service - Registration and login for students and admins"""

import logging

from sqlalchemy.orm import Session

from ...errors import api_error
from ...models import Admin, Student
from ...security_utils import create_access_token, hash_password, verify_password
from .repository import AccountRepository
from .schemas import LoginRequest, StudentRegister

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


class AuthService:
    """Service layer for authentication"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AccountRepository()

    def register_student(self, data: StudentRegister) -> tuple[Student, str]:
        """Create a student account and issue its first access token"""
        if self.repo.get_student_by_email(self.db, data.email):
            logger.info(f"⚠️ Registration rejected, email already in use: {data.email}")
            raise api_error(400, "Student with this email already exists", "DUPLICATE_ENTRY")

        student = self.repo.create_student(
            self.db,
            name=data.name,
            email=data.email,
            phone=data.phone,
            password=hash_password(data.password),
        )
        logger.info(f"🆕 Student registered: id={student.id}")

        return student, create_access_token(student.id, "student")

    def login_student(self, data: LoginRequest) -> tuple[Student, str]:
        student = self.repo.get_student_by_email(self.db, data.email)
        # Same message for unknown email and wrong password
        if not student or not verify_password(data.password, student.password):
            logger.info("🚫 Failed student login attempt")
            raise api_error(400, INVALID_CREDENTIALS_MESSAGE, "INVALID_CREDENTIALS")

        return student, create_access_token(student.id, "student")

    def login_admin(self, data: LoginRequest) -> tuple[Admin, str]:
        admin = self.repo.get_admin_by_email(self.db, data.email)
        if not admin or not verify_password(data.password, admin.password):
            logger.warning("🚫 Failed admin login attempt")
            raise api_error(400, INVALID_CREDENTIALS_MESSAGE, "INVALID_CREDENTIALS")

        logger.info(f"✅ Admin logged in: id={admin.id}")
        return admin, create_access_token(admin.id, "admin")

    def ensure_admin(self, email: str, password: str, name: str) -> tuple[Admin, bool]:
        """Create the admin account unless one already uses this email

        Returns:
            Tuple of (admin, created)
        """
        email = email.strip().lower()
        admin = self.repo.get_admin_by_email(self.db, email)
        if admin:
            return admin, False

        admin = self.repo.create_admin(self.db, name=name, email=email, password=hash_password(password))
        logger.info(f"🆕 Admin created: id={admin.id}")
        return admin, True
