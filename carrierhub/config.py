import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./carrierhub.db")

# Security - CRITICAL: No default JWT secret in production
JWT_SECRET = os.getenv("JWT_SECRET")
if not JWT_SECRET:
    import warnings

    warnings.warn(
        "JWT_SECRET not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2
    )
    JWT_SECRET = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only

# Accepts "7d", "12h", "30m", "45s" or a plain number of seconds
JWT_EXPIRES_IN = os.getenv("JWT_EXPIRES_IN", "7d")

# bcrypt work factor; tests lower it to keep hashing fast
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

# Razorpay Configuration
RAZORPAY_KEY_ID = os.getenv("RAZORPAY_KEY_ID")
RAZORPAY_KEY_SECRET = os.getenv("RAZORPAY_KEY_SECRET")
RAZORPAY_WEBHOOK_SECRET = os.getenv("RAZORPAY_WEBHOOK_SECRET")

# Bookings - amounts are in paise (1 INR = 100 paise)
MIN_BOOKING_AMOUNT = int(os.getenv("MIN_BOOKING_AMOUNT", "1000"))
DEFAULT_CURRENCY = "INR"

# Rate limiting
RATE_LIMIT_WINDOW_SECONDS = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "900"))
RATE_LIMIT_MAX_REQUESTS = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "100"))
AUTH_RATE_LIMIT_MAX_REQUESTS = int(os.getenv("AUTH_RATE_LIMIT_MAX_REQUESTS", "15"))
WEBHOOK_RATE_LIMIT_PER_MINUTE = int(os.getenv("WEBHOOK_RATE_LIMIT_PER_MINUTE", "100"))

# Hosted payment page
PAYMENT_SESSION_TTL_SECONDS = int(os.getenv("PAYMENT_SESSION_TTL_SECONDS", "900"))
APP_DEEP_LINK = os.getenv("APP_DEEP_LINK", "carrierhub://")

# CORS - comma separated, "*" allows every origin
ALLOWED_ORIGINS = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "*").split(",") if o.strip()]
