"""Auth domain schemas - Pydantic models for validation"""

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_email, validate_indian_phone, validate_password_strength


class StudentRegister(BaseModel):
    """Schema for student self-registration"""

    name: str
    email: str
    phone: str
    password: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not 2 <= len(v) <= 50:
            raise ValueError("Name must be between 2 and 50 characters")
        return v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        return validate_indian_phone(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return validate_password_strength(v)


class LoginRequest(BaseModel):
    """Schema for student and admin login"""

    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return validate_email(v)

    @field_validator("password")
    @classmethod
    def require_password(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v
