"""
Custom exceptions and error handlers for QuizHub Backend
Every error leaves the API in the {success: false, message, error} envelope
"""

import logging
from typing import Any, Dict, Optional

import sentry_sdk
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from quizhub.core.config import settings

logger = logging.getLogger(__name__)


class QuizHubException(Exception):
    """Base exception for QuizHub application"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or "INTERNAL_ERROR"
        self.details = details or {}
        super().__init__(self.message)


class DatabaseException(QuizHubException):
    """Database operation exception"""

    def __init__(
        self, message: str = "Database operation failed", details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="DATABASE_ERROR",
            details=details,
        )


class AuthenticationException(QuizHubException):
    """Authentication exception"""

    def __init__(
        self, message: str = "Authentication required", details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="AUTHENTICATION_ERROR",
            details=details,
        )


class AuthorizationException(QuizHubException):
    """Authorization exception"""

    def __init__(
        self, message: str = "Insufficient permissions", details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="AUTHORIZATION_ERROR",
            details=details,
        )


class ValidationException(QuizHubException):
    """Validation exception"""

    def __init__(
        self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="VALIDATION_ERROR",
            details=details,
        )


class NotFoundException(QuizHubException):
    """Resource not found exception"""

    def __init__(self, resource: str = "Resource", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"{resource} not found",
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="NOT_FOUND",
            details=details,
        )


class DuplicateException(ValidationException):
    """Duplicate resource, reported to clients as a validation error"""

    def __init__(self, resource: str = "Resource", details: Optional[Dict[str, Any]] = None):
        super().__init__(message=f"{resource} already exists", details=details)
        self.error_code = "DUPLICATE_ERROR"


class FileUploadException(QuizHubException):
    """File upload exception"""

    def __init__(
        self, message: str = "File upload failed", details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="FILE_UPLOAD_ERROR",
            details=details,
        )


class PayloadTooLargeException(QuizHubException):
    """Upload exceeds the configured size limit"""

    def __init__(self, limit_bytes: int):
        super().__init__(
            message=f"File exceeds the {limit_bytes // (1024 * 1024)}MB limit",
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            error_code="PAYLOAD_TOO_LARGE",
            details={"limitBytes": limit_bytes},
        )


def create_error_response(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """
    Create standardized error response

    Args:
        request: FastAPI request object
        status_code: HTTP status code
        error_code: Application error code
        message: Error message
        details: Additional error details
        headers: Extra response headers

    Returns:
        JSON response in the API envelope
    """
    error_response = {
        "success": False,
        "message": message,
        "error": {
            "code": error_code,
            "details": details or {},
        },
    }

    if hasattr(request.state, "request_id"):
        error_response["error"]["requestId"] = request.state.request_id

    return JSONResponse(status_code=status_code, content=error_response, headers=headers)


async def quizhub_exception_handler(request: Request, exc: QuizHubException) -> JSONResponse:
    """Handle QuizHub custom exceptions"""
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        f"{type(exc).__name__}: {exc.message}",
        extra={
            "error_code": exc.error_code,
            "status_code": exc.status_code,
            "path": request.url.path,
        },
    )

    if settings.SENTRY_DSN and exc.status_code >= 500:
        sentry_sdk.capture_exception(exc)

    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}

    return create_error_response(
        request=request,
        status_code=exc.status_code,
        error_code=exc.error_code,
        message=exc.message,
        details=exc.details,
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle framework HTTP exceptions (404 routes, 405 methods)"""
    logger.warning(
        f"HTTP exception: {exc.detail}",
        extra={"status_code": exc.status_code, "path": request.url.path},
    )

    return create_error_response(
        request=request,
        status_code=exc.status_code,
        error_code="HTTP_ERROR",
        message=str(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle request validation errors

    Args:
        request: FastAPI request object
        exc: Validation error

    Returns:
        400 response with per-field details
    """
    errors = []
    for error in exc.errors():
        errors.append(
            {
                "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
                "message": error["msg"],
                "type": error["type"],
            }
        )

    logger.info("Validation error", extra={"errors": errors, "path": request.url.path})

    message = "Request validation failed"
    if errors:
        message = f"{errors[0]['field'] or 'body'}: {errors[0]['message']}"

    return create_error_response(
        request=request,
        status_code=status.HTTP_400_BAD_REQUEST,
        error_code="VALIDATION_ERROR",
        message=message,
        details={"errors": errors},
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Database errors surface as DATABASE_ERROR without leaking the statement"""
    logger.error(
        f"Database error: {exc}",
        extra={"exception_type": type(exc).__name__, "path": request.url.path},
        exc_info=exc,
    )

    if settings.SENTRY_DSN:
        sentry_sdk.capture_exception(exc)

    error = DatabaseException()
    return create_error_response(
        request=request,
        status_code=error.status_code,
        error_code=error.error_code,
        message=error.message,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions with a generic message"""
    logger.error(
        f"Unexpected error: {exc}",
        extra={"exception_type": type(exc).__name__, "path": request.url.path},
        exc_info=exc,
    )

    if settings.SENTRY_DSN:
        sentry_sdk.capture_exception(exc)

    return create_error_response(
        request=request,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code="INTERNAL_ERROR",
        message="An unexpected error occurred",
    )


def register_exception_handlers(app):
    """
    Register all exception handlers with the FastAPI app

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(QuizHubException, quizhub_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)

    # Catch-all handler for unexpected exceptions
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers registered")
