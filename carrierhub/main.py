import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import models  # noqa: F401  (registers tables on Base)
from .config import ALLOWED_ORIGINS, ENVIRONMENT
from .database import Base, engine
from .domain.admin.router import router as admin_router
from .domain.auth.router import router as auth_router
from .domain.bookings.router import router as bookings_router
from .domain.categories.router import router as categories_router
from .domain.payments.router import router as payments_router
from .errors import (
    http_exception_handler,
    integrity_error_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from .rate_limiter import general_rate_limit, get_redis_client, reset_memory_cache
from .security_headers import SecurityHeadersMiddleware

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("urllib3").setLevel(logging.WARNING)

SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    Base.metadata.create_all(bind=engine, checkfirst=True)
    logger.info("Database tables created successfully")

    reset_memory_cache()
    if get_redis_client() is None:
        logger.info("Rate limiting running on per-process memory")

    yield

    logger.info("Application shutting down...")


app = FastAPI(title="CarrierHub API", version="1.0.0", lifespan=lifespan)

app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(IntegrityError, integrity_error_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

if SECURITY_HEADERS_ENABLED:
    app.add_middleware(SecurityHeadersMiddleware, exclude_paths=["/health", "/docs", "/openapi.json"])
    logger.info("Security headers enabled")
else:
    logger.warning("Security headers DISABLED - only use in development!")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Authorization", "Content-Type", "X-Razorpay-Signature", "X-Requested-With"],
)

# Routes
for api_router in (auth_router, bookings_router, payments_router, admin_router, categories_router):
    app.include_router(api_router, dependencies=[Depends(general_rate_limit)])


@app.get("/health")
async def health_check():
    return {
        "success": True,
        "message": "CarrierHub Backend is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": ENVIRONMENT,
    }


API_ENDPOINTS = {
    "auth": {
        "POST /api/auth/register": "Register a new student",
        "POST /api/auth/login": "Student login",
        "GET /api/auth/me": "Get current student profile",
        "POST /api/auth/admin/login": "Admin login",
    },
    "categories": {
        "GET /api/categories": "Get consultant categories",
    },
    "bookings": {
        "POST /api/bookings": "Create a new booking",
        "GET /api/bookings/me": "Get student bookings",
        "GET /api/bookings/{id}": "Get specific booking",
    },
    "payments": {
        "GET /api/payments/key": "Get Razorpay key ID (public)",
        "POST /api/payments/create": "Create Razorpay order",
        "POST /api/payments/verify": "Verify payment",
        "POST /api/payments/webhook": "Razorpay webhook",
        "POST /api/payments/create-payment-session": "Create a hosted payment link",
        "GET /api/payments/web-payment": "Hosted checkout page",
    },
    "admin": {
        "GET /api/admin/bookings": "Get all bookings (admin)",
        "PATCH /api/admin/bookings/{id}/status": "Update booking status",
        "GET /api/admin/bookings/export": "Export bookings as CSV",
        "GET /api/admin/dashboard/stats": "Dashboard statistics",
    },
}


@app.get("/api/docs")
async def api_docs():
    return {"success": True, "message": "API Documentation", "data": {"endpoints": API_ENDPOINTS}}
