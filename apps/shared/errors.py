"""
Error types and JSON error responses

Flows raise ApiError subclasses; the handlers registered here turn them,
and any other failure, into a consistent {"error", "category"} payload.
Unexpected errors are logged in full server-side and sanitized for clients.
"""

import logging
import uuid
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors that map to a client-facing status code."""

    status_code = status.HTTP_400_BAD_REQUEST
    category = "client_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    category = "validation"


class AuthenticationError(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    category = "security"


class ForbiddenError(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    category = "security"


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    category = "not_found"


class ConflictError(ApiError):
    status_code = status.HTTP_409_CONFLICT
    category = "conflict"


def error_response(message: str, category: str, status_code: int, headers: Optional[dict] = None) -> JSONResponse:
    """Consistent error payloads across the API."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error": message,
            "category": category,
        },
        headers=headers,
    )


def log_and_sanitize_error(
    error: Exception,
    context: str,
    user_message: Optional[str] = None
) -> tuple[str, str]:
    """
    Log full error details server-side and return sanitized message for client.

    Args:
        error: The exception that occurred
        context: Description of what operation failed (e.g., "GET /today")
        user_message: Optional custom message to show user. If None, uses generic message.

    Returns:
        Tuple of (sanitized_message, error_id) for client response
    """
    # Generate unique error ID for correlation
    error_id = str(uuid.uuid4())[:8]

    logger.error(
        f"{context} failed [{error_id}]: {type(error).__name__}: {str(error)}",
        exc_info=error,
    )

    if user_message:
        sanitized = f"{user_message} (Error ID: {error_id})"
    else:
        sanitized = f"{context} failed. Please try again later. (Error ID: {error_id})"

    return sanitized, error_id


async def api_error_handler(request: Request, exc: ApiError):
    return error_response(
        message=exc.message,
        category=exc.category,
        status_code=exc.status_code,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Invalid request: {location} {first.get('msg', '')}".replace("  ", " ").strip()
    else:
        message = "Invalid request"
    return error_response(
        message=message,
        category="validation",
        status_code=status.HTTP_400_BAD_REQUEST,
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    detail = exc.detail
    message = (
        detail.get("message") if isinstance(detail, dict) else str(detail)
    ) or "Request failed."
    category = (
        detail.get("category") if isinstance(detail, dict) else None
    )

    if not category:
        if exc.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN):
            category = "security"
        elif exc.status_code >= 500:
            category = "server_error"
        else:
            category = "client_error"

    return error_response(
        message=message,
        category=category,
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s", request.url.path, exc_info=exc)
    return error_response(
        message="A database error occurred while processing the request.",
        category="database",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


async def unexpected_exception_handler(request: Request, exc: Exception):
    sanitized, _ = log_and_sanitize_error(exc, f"{request.method} {request.url.path}")
    return error_response(
        message=sanitized,
        category="server_error",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register every JSON error handler on a FastAPI app."""
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(Exception, unexpected_exception_handler)
