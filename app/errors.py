"""
Error Handling for the Bookstore API

Centralized error handling:
- Enumerated error kinds with their HTTP status
- Structured `{"error", "code"}` responses
- Logging of errors
"""
import logging
import traceback

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class BookstoreError(Exception):
    """Base exception for bookstore errors."""

    code = "INTERNAL_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class Unauthenticated(BookstoreError):
    """No bearer token on a protected route."""
    code = "UNAUTHENTICATED"
    status_code = status.HTTP_401_UNAUTHORIZED


class Forbidden(BookstoreError):
    """Token present but its signature, expiry or claims are invalid."""
    code = "FORBIDDEN"
    status_code = status.HTTP_403_FORBIDDEN


class InvalidCredentials(BookstoreError):
    code = "INVALID_CREDENTIALS"
    status_code = status.HTTP_401_UNAUTHORIZED


class Conflict(BookstoreError):
    code = "CONFLICT"
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidInput(BookstoreError):
    code = "INVALID_INPUT"
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidQuery(BookstoreError):
    """Non-numeric pagination or filter parameters."""
    code = "INVALID_QUERY"
    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(BookstoreError):
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND


class UpstreamFailure(BookstoreError):
    """The store or the image host failed."""
    code = "UPSTREAM_FAILURE"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def create_error_response(error: str, code: str, status_code: int) -> JSONResponse:
    """Create standardized error response."""
    return JSONResponse(status_code=status_code, content={"error": error, "code": code})


def setup_exception_handlers(app):
    """Register exception handlers with FastAPI app."""

    @app.exception_handler(BookstoreError)
    async def bookstore_exception_handler(request: Request, exc: BookstoreError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s - %s", request.method, request.url.path, exc.code, exc.message)
        else:
            logger.warning("%s %s rejected: %s - %s", request.method, request.url.path, exc.code, exc.message)
        return create_error_response(exc.message, exc.code, exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()))
        message = f"{location}: {first.get('msg', 'invalid request')}" if location else "Invalid request"
        return create_error_response(message, InvalidInput.code, InvalidInput.status_code)

    @app.exception_handler(SQLAlchemyError)
    async def store_exception_handler(request: Request, exc: SQLAlchemyError):
        logger.error(
            "Store error on %s %s: %s\n%s",
            request.method, request.url.path, exc, traceback.format_exc(),
        )
        return create_error_response("Database operation failed", UpstreamFailure.code, UpstreamFailure.status_code)
