"""
Security headers middleware for FastAPI.

Adds standard security headers to every response.
"""

from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from models.config import settings

STATIC_HEADERS = {
    # Prevent MIME type sniffing
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), geolocation=(), microphone=(), payment=(), usb=()",
    # JSON API: nothing should be executed from our responses
    "Content-Security-Policy": "default-src 'none'; img-src 'self' data:; frame-ancestors 'self'",
    # Uploaded images are loaded cross-origin by the frontend
    "Cross-Origin-Resource-Policy": "cross-origin",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Middleware that adds security headers to all responses.

    HSTS is only sent in production. API responses default to
    ``Cache-Control: no-store``; uploaded files served from ``/uploads`` keep
    whatever caching the static file handler set.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        response = await call_next(request)

        for name, value in STATIC_HEADERS.items():
            response.headers[name] = value

        if settings.is_production:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        if (
            not request.url.path.startswith("/uploads")
            and "Cache-Control" not in response.headers
        ):
            response.headers["Cache-Control"] = "no-store, max-age=0"

        return response
