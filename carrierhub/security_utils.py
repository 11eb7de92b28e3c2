"""
Security Utilities
Password hashing, access tokens and signed payment-session tokens
"""

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

# Token generation and validation
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from jose import ExpiredSignatureError, JWTError
from jose import jwt as jose_jwt

# Password hashing
from passlib.context import CryptContext

from .config import BCRYPT_ROUNDS, JWT_EXPIRES_IN, JWT_SECRET

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
PAYMENT_SESSION_SALT = "payment-session"

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)


class TokenExpiredError(Exception):
    """Raised when a signed token is well-formed but past its lifetime"""

    pass


class InvalidTokenError(Exception):
    """Raised when a signed token cannot be decoded or verified"""

    pass


# ============================================================================
# PASSWORD SECURITY
# ============================================================================


def hash_password(password: str) -> str:
    """Hash password using bcrypt"""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against bcrypt hash"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception as e:
        logger.error(f"Password verification error: {e}")
        return False


# ============================================================================
# ACCESS TOKENS (JWT)
# ============================================================================

_DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(value: str) -> timedelta:
    """
    Parse a lifetime such as "7d", "12h", "30m", "45s" or "3600".

    Raises:
        ValueError: If the value is not a recognised duration
    """
    match = _DURATION_PATTERN.match(str(value).lower())
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(seconds=int(amount) * _DURATION_UNITS[unit])


def create_access_token(subject_id: int, subject_type: str, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed JWT for a student or an admin.

    Args:
        subject_id: Primary key of the authenticated account
        subject_type: "student" or "admin"
        expires_delta: Token lifetime (default JWT_EXPIRES_IN)
    """
    lifetime = expires_delta if expires_delta is not None else parse_duration(JWT_EXPIRES_IN)
    now = datetime.now(timezone.utc)
    to_encode = {
        "id": subject_id,
        "type": subject_type,
        "iat": now,
        "exp": now + lifetime,
    }
    return jose_jwt.encode(to_encode, JWT_SECRET, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Verify and decode a JWT.

    Raises:
        TokenExpiredError: The token signature is valid but it has expired
        InvalidTokenError: The token is malformed or the signature is wrong
    """
    try:
        return jose_jwt.decode(token, JWT_SECRET, algorithms=[ALGORITHM])
    except ExpiredSignatureError as e:
        raise TokenExpiredError("Token expired") from e
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        raise InvalidTokenError("Invalid token") from e


# ============================================================================
# PAYMENT SESSION TOKENS
# ============================================================================


def _session_serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(JWT_SECRET, salt=PAYMENT_SESSION_SALT)


def generate_payment_session_token(booking_id: int, student_id: int) -> str:
    """Generate a signed, timestamped token identifying a booking checkout session"""
    return _session_serializer().dumps({"bookingId": booking_id, "studentId": student_id})


def verify_payment_session_token(token: str, max_age: int) -> dict[str, Any]:
    """
    Verify and decode a payment session token

    Raises:
        TokenExpiredError: Older than max_age seconds
        InvalidTokenError: Tampered with or not a session token
    """
    try:
        data = _session_serializer().loads(token, max_age=max_age)
    except SignatureExpired as e:
        logger.warning("Payment session token expired")
        raise TokenExpiredError("Payment session expired") from e
    except BadSignature as e:
        logger.warning("Invalid payment session token signature")
        raise InvalidTokenError("Invalid payment session") from e

    if not isinstance(data, dict) or "bookingId" not in data or "studentId" not in data:
        raise InvalidTokenError("Invalid payment session")
    return data
