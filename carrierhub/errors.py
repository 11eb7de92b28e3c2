"""
Error envelope helpers

Every failure leaves the API as {"success": false, "message": ..., "error": ...}.
Services raise HTTPException via api_error(); the handlers registered in main.py
render the envelope.
"""

import logging
from typing import Any, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import ENVIRONMENT

logger = logging.getLogger(__name__)

# Fallback error codes for HTTPExceptions raised without one (e.g. by Starlette routing)
DEFAULT_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    429: "RATE_LIMIT_EXCEEDED",
    502: "PAYMENT_GATEWAY_ERROR",
    503: "SERVICE_UNAVAILABLE",
}


def api_error(
    status_code: int,
    message: str,
    error: str,
    headers: Optional[dict[str, str]] = None,
    **extra: Any,
) -> HTTPException:
    """Build an HTTPException whose detail carries the envelope fields"""
    detail = {"message": message, "error": error, **extra}
    return HTTPException(status_code=status_code, detail=detail, headers=headers)


def error_body(message: str, error: str, **extra: Any) -> dict:
    return {"success": False, "message": message, "error": error, **extra}


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict):
        body = error_body(
            detail.get("message", "Request failed"),
            detail.get("error", DEFAULT_ERROR_CODES.get(exc.status_code, "ERROR")),
            **{k: v for k, v in detail.items() if k not in ("message", "error")},
        )
    elif exc.status_code == 404 and detail == "Not Found":
        body = error_body(f"Route {request.url.path} not found", "NOT_FOUND")
    else:
        body = error_body(str(detail), DEFAULT_ERROR_CODES.get(exc.status_code, "ERROR"))

    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Convert request validation failures into 400 VALIDATION_ERROR responses"""
    details = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg"),
        }
        for error in exc.errors()
    ]
    logger.warning(f"Validation error for {request.url.path}: {details}")
    return JSONResponse(
        status_code=400,
        content=error_body("Validation failed", "VALIDATION_ERROR", details=details),
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning(f"Integrity error for {request.url.path}: {exc.orig}")
    return JSONResponse(
        status_code=400,
        content=error_body("A record with this information already exists", "DUPLICATE_ENTRY"),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"{request.method} {request.url.path} - Unhandled error: {exc}")
    extra = {"stack": repr(exc)} if ENVIRONMENT == "development" else {}
    return JSONResponse(
        status_code=500,
        content=error_body("Internal Server Error", "INTERNAL_ERROR", **extra),
    )
