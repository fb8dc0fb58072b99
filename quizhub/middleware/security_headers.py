"""
Security headers middleware for QuizHub
"""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from quizhub.core.config import settings


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add security headers to responses
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        if settings.SECURITY_HEADERS_ENABLED:
            response.headers["X-Frame-Options"] = "DENY"
            response.headers["X-Content-Type-Options"] = "nosniff"
            response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
            response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"

            # JSON only; the docs pages need their CDN assets
            if not request.url.path.startswith(("/docs", "/redoc")):
                response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"

            if settings.is_production():
                response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response
