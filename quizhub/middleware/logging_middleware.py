"""
Logging middleware for QuizHub
Logs every request with its outcome and timing
"""

import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("quizhub.request")

# Health probes and long-polls would drown the log
QUIET_PREFIXES = ("/health", "/socket/polling")


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log all HTTP requests and responses
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if path.startswith(QUIET_PREFIXES):
            return await call_next(request)

        start_time = time.time()
        request_id = getattr(request.state, "request_id", "unknown")

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "path": path,
                    "process_time": round(time.time() - start_time, 3),
                    "error": str(e),
                },
                exc_info=True,
            )
            raise

        process_time = time.time() - start_time
        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            f"{request.method} {path} -> {response.status_code}",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": path,
                "status_code": response.status_code,
                "process_time": round(process_time, 3),
                "client": request.client.host if request.client else "unknown",
            },
        )
        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        return response
