"""
Rate limiting for QuizHub (slowapi)
"""

import logging

from fastapi import FastAPI, Request
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from quizhub.core.config import settings
from quizhub.core.exceptions import create_error_response

logger = logging.getLogger(__name__)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    logger.warning(f"Rate limit exceeded for {get_remote_address(request)} on {request.url.path}")
    return create_error_response(
        request,
        status_code=429,
        error_code="RATE_LIMIT_EXCEEDED",
        message="Too many requests. Please try again later.",
        details={"limit": str(exc.detail)},
        headers={"Retry-After": str(settings.RATE_LIMIT_PERIOD)},
    )


def setup_rate_limiting(app: FastAPI) -> Limiter:
    """Apply the default per-client limit to every HTTP route"""
    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[f"{settings.RATE_LIMIT_REQUESTS}/{settings.RATE_LIMIT_PERIOD} seconds"],
        storage_uri=settings.get_redis_url() if settings.REDIS_ENABLED else "memory://",
    )
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)
    return limiter
