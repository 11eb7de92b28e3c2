"""
Security Headers Middleware for FastAPI

Adds security headers to all responses:
- X-Frame-Options, X-Content-Type-Options, Referrer-Policy
- Content-Security-Policy (JSON API policy, relaxed for the hosted checkout page)
- Strict-Transport-Security (production only)
- Permissions-Policy
"""

import logging
from typing import Callable, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from .config import ENVIRONMENT

logger = logging.getLogger(__name__)

IS_PRODUCTION = ENVIRONMENT == "production"

# Pages that load the Razorpay checkout widget
CHECKOUT_PAGE_PATHS = ("/api/payments/web-payment",)


def get_csp_policy(checkout_page: bool = False) -> str:
    """
    Generate Content-Security-Policy header value.

    JSON responses get a locked-down policy. The hosted checkout page needs the
    Razorpay script and frames plus its own inline script and styles.
    """
    if not checkout_page:
        return "default-src 'none'; frame-ancestors 'none'; base-uri 'none'; form-action 'none'"

    directives = [
        "default-src 'self'",
        "script-src 'self' 'unsafe-inline' https://checkout.razorpay.com",
        "style-src 'self' 'unsafe-inline'",
        "img-src 'self' data: https:",
        "frame-src https://api.razorpay.com https://checkout.razorpay.com",
        "connect-src 'self' https://api.razorpay.com https://lumberjack.razorpay.com",
        "base-uri 'none'",
        "form-action 'self'",
    ]
    return "; ".join(directives)


def get_permissions_policy(checkout_page: bool = False) -> str:
    features = [
        "accelerometer=()",
        "camera=()",
        "geolocation=()",
        "gyroscope=()",
        "magnetometer=()",
        "microphone=()",
        "usb=()",
    ]
    # Payment Request API is used by the checkout widget
    features.append("payment=(self \"https://checkout.razorpay.com\")" if checkout_page else "payment=()")
    return ", ".join(features)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware that adds security headers to all responses"""

    def __init__(self, app, exclude_paths: Optional[list[str]] = None):
        super().__init__(app)
        self.exclude_paths = exclude_paths or []

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        path = request.url.path
        if any(path.startswith(excluded) for excluded in self.exclude_paths):
            return response

        checkout_page = path.startswith(CHECKOUT_PAGE_PATHS)

        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = get_csp_policy(checkout_page)
        response.headers["Permissions-Policy"] = get_permissions_policy(checkout_page)

        if IS_PRODUCTION:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        # Authenticated responses must not be cached
        if "Cache-Control" not in response.headers:
            response.headers["Cache-Control"] = "no-store"

        return response
