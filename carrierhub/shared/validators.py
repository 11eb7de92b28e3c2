"""Shared validation utilities"""

import re
from typing import Optional

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def validate_indian_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate and normalize an Indian mobile number.

    Accepts an optional +91 / 91 / 0 prefix, spaces and dashes.

    Returns:
        The 10-digit subscriber number

    Raises:
        ValueError: If the number is not a valid Indian mobile number
    """
    if not phone:
        raise ValueError("Please provide a valid Indian phone number")

    digits = re.sub(r"[\s\-()]", "", phone)
    if digits.startswith("+91"):
        digits = digits[3:]
    elif digits.startswith("91") and len(digits) == 12:
        digits = digits[2:]
    elif digits.startswith("0") and len(digits) == 11:
        digits = digits[1:]

    if not re.fullmatch(r"[6-9]\d{9}", digits):
        raise ValueError("Please provide a valid Indian phone number")

    return digits


def validate_email(email: Optional[str]) -> str:
    """
    Validate email format.

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    email = (email or "").strip().lower()

    if not EMAIL_PATTERN.match(email):
        raise ValueError("Please provide a valid email")

    return email


def validate_password_strength(password: str) -> str:
    if len(password) < 8:
        raise ValueError("Password must be at least 8 characters long")
    if not (re.search(r"[a-z]", password) and re.search(r"[A-Z]", password) and re.search(r"\d", password)):
        raise ValueError(
            "Password must contain at least one uppercase letter, one lowercase letter, and one number"
        )
    return password
