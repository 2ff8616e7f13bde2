"""Error taxonomy, classification and exception handlers.

This module provides:
- A closed set of application error classes, one per error kind, each
  carrying only the fields its envelope needs
- ``classify_exception`` mapping any raised exception onto that set
- The canonical error envelope builder shared by handlers and middleware
- FastAPI exception handler registration
"""

from __future__ import annotations

import re
import socket
import traceback
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any, ClassVar

import asyncpg
import httpx
from fastapi import status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from pantry_chef.observability.logging import get_logger


if TYPE_CHECKING:
    from fastapi import FastAPI
    from starlette.requests import Request


logger = get_logger(__name__)


class ErrorKind(StrEnum):
    """Value of ``error.type`` in the error envelope."""

    NOT_FOUND = "NotFoundError"
    VALIDATION = "ValidationError"
    BAD_REQUEST = "BadRequestError"
    DUPLICATE_KEY = "DuplicateKeyError"
    AUTHENTICATION = "AuthenticationError"
    FORBIDDEN = "ForbiddenError"
    UPLOAD = "UploadError"
    AI_SERVICE = "AIServiceError"
    RATE_LIMIT = "RateLimitError"
    DATABASE = "DatabaseError"
    NETWORK = "NetworkError"
    PAYLOAD_TOO_LARGE = "PayloadTooLargeError"
    INVALID_JSON = "InvalidJSONError"
    UNSUPPORTED_MEDIA_TYPE = "UnsupportedMediaTypeError"
    METHOD_NOT_ALLOWED = "MethodNotAllowedError"
    TIMEOUT = "TimeoutError"
    INTERNAL = "InternalServerError"


# =============================================================================
# Error classes
# =============================================================================


class AppError(Exception):
    """Base class of every error the API reports.

    Subclasses fix ``kind``, ``status_code`` and ``default_message``; the
    instance message defaults to ``default_message``.
    """

    kind: ClassVar[ErrorKind] = ErrorKind.INTERNAL
    status_code: ClassVar[int] = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: ClassVar[str] = (
        "An unexpected error occurred. Please try again later."
    )

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def envelope_fields(self) -> dict[str, Any]:
        """Kind-specific members of the ``error`` object."""
        return {}


class NotFoundError(AppError):
    """Missing resource, malformed identifier or unmatched route."""

    kind = ErrorKind.NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found."

    @classmethod
    def for_id(cls, identifier: Any) -> NotFoundError:
        return cls(f"Resource not found with id: {identifier}")


class ValidationError(AppError):
    """Request- or store-level validation failure."""

    kind = ErrorKind.VALIDATION
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request. Please check your input."

    def __init__(self, messages: list[str]) -> None:
        self.messages = messages
        super().__init__(", ".join(messages), details={"errors": messages})


class BadRequestError(AppError):
    """A request rejected by a handler rule (e.g. already saved)."""

    kind = ErrorKind.BAD_REQUEST
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request. Please check your input."


class DuplicateKeyError(AppError):
    """Uniqueness violation reported by the store."""

    kind = ErrorKind.DUPLICATE_KEY
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, field: str, value: Any) -> None:
        self.field = field
        self.value = value
        super().__init__(
            f"{field[:1].upper()}{field[1:]} '{value}' already exists",
            details={"field": field, "value": value},
        )


class AuthenticationError(AppError):
    """Missing, invalid or expired credentials."""

    kind = ErrorKind.AUTHENTICATION
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized. Please authenticate."

    INVALID_TOKEN: ClassVar[str] = "Invalid authentication token. Please log in again."
    EXPIRED_TOKEN: ClassVar[str] = (
        "Authentication token has expired. Please log in again."
    )

    @classmethod
    def invalid_token(cls) -> AuthenticationError:
        return cls(cls.INVALID_TOKEN)

    @classmethod
    def expired_token(cls) -> AuthenticationError:
        return cls(cls.EXPIRED_TOKEN)


class ForbiddenError(AppError):
    """Authenticated but not allowed to access the resource."""

    kind = ErrorKind.FORBIDDEN
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden. You don't have permission to access this resource."


class UploadError(AppError):
    """Multipart upload constraint violation."""

    kind = ErrorKind.UPLOAD
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "File upload error"

    MESSAGES: ClassVar[dict[str, str]] = {
        "file_size": "File size too large. Maximum allowed size is 10MB.",
        "file_count": "Too many files uploaded.",
        "unexpected_file": "Unexpected file field.",
    }

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(self.MESSAGES.get(reason), details={"reason": reason})


class AIServiceError(AppError):
    """The AI provider failed or is not configured."""

    kind = ErrorKind.AI_SERVICE
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "AI service is temporarily unavailable. Please try again later."


class RateLimitError(AppError):
    """A rate limit policy rejected the request."""

    kind = ErrorKind.RATE_LIMIT
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many requests. Please slow down and try again later."

    def __init__(self, message: str | None = None, *, retry_after: int) -> None:
        self.retry_after = retry_after
        super().__init__(message)

    def envelope_fields(self) -> dict[str, Any]:
        return {"retryAfter": self.retry_after}


class DatabaseError(AppError):
    """The store is unreachable or the pool is not available."""

    kind = ErrorKind.DATABASE
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Database connection error. Please try again later."


class NetworkError(AppError):
    """Transport-level failure (reset, timeout, DNS)."""

    kind = ErrorKind.NETWORK
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = (
        "Network connection error. Please check your internet connection "
        "and try again."
    )


class PayloadTooLargeError(AppError):
    kind = ErrorKind.PAYLOAD_TOO_LARGE
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    default_message = (
        "Request payload too large. Please reduce the size of your request."
    )


class InvalidJSONError(AppError):
    kind = ErrorKind.INVALID_JSON
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid JSON format in request body."


class UnsupportedMediaTypeError(AppError):
    kind = ErrorKind.UNSUPPORTED_MEDIA_TYPE
    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
    default_message = (
        "Unsupported Media Type. Only application/json and "
        "multipart/form-data are supported."
    )


class MethodNotAllowedError(AppError):
    kind = ErrorKind.METHOD_NOT_ALLOWED
    status_code = status.HTTP_405_METHOD_NOT_ALLOWED
    default_message = "Method not allowed."


class RequestTimeoutError(AppError):
    """The request exceeded its time budget."""

    kind = ErrorKind.TIMEOUT
    status_code = status.HTTP_408_REQUEST_TIMEOUT
    default_message = (
        "Request timeout. The server took too long to respond. Please try again."
    )

    def __init__(self, timeout_ms: int) -> None:
        self.timeout_ms = timeout_ms
        super().__init__()

    def envelope_fields(self) -> dict[str, Any]:
        return {"timeout": self.timeout_ms}


class InternalServerError(AppError):
    """Anything that could not be classified."""


# =============================================================================
# Classification
# =============================================================================

# Matches asyncpg's unique violation detail: Key (email)=(a@b.c) already exists.
_UNIQUE_DETAIL_RE = re.compile(r"Key \((?P<field>[^)]+)\)=\((?P<value>.*)\) already exists")

_AI_PROVIDER_SIGNATURES = ("Azure OpenAI", "OpenAI")

_MULTIPART_REASONS = (
    ("Too many files", "file_count"),
    ("exceeded maximum size", "file_size"),
    ("Content-Disposition", "unexpected_file"),
)


def _multipart_error(exc: BaseException) -> MultiPartException | None:
    """Find a multipart parser error in the exception or its causes."""
    current: BaseException | None = exc
    while current is not None:
        if isinstance(current, MultiPartException):
            return current
        current = current.__cause__ or current.__context__
    return None


def _upload_error(exc: MultiPartException) -> UploadError:
    for fragment, reason in _MULTIPART_REASONS:
        if fragment in exc.message:
            return UploadError(reason)
    return UploadError("malformed")


def _validation_messages(exc: RequestValidationError) -> list[str]:
    messages = []
    for error in exc.errors():
        if error.get("type") == "value_error" and error.get("ctx", {}).get("error"):
            messages.append(str(error["ctx"]["error"]))
            continue
        field = ".".join(str(loc) for loc in error["loc"] if loc not in ("body", "query"))
        messages.append(f"{field}: {error['msg']}" if field else error["msg"])
    return messages


def classify_exception(exc: BaseException) -> AppError:
    """Map any exception onto exactly one error kind.

    Application errors pass through unchanged. Multipart parser errors,
    including framework errors raised from one, become ``UploadError``.
    Framework, store and transport errors are translated by type; an exception
    whose message carries an AI provider signature becomes ``AIServiceError``.
    Everything else is an ``InternalServerError``.
    """
    if isinstance(exc, AppError):
        return exc

    multipart = _multipart_error(exc)
    if multipart is not None:
        return _upload_error(multipart)

    if isinstance(exc, RequestValidationError):
        if any(error.get("type") == "json_invalid" for error in exc.errors()):
            return InvalidJSONError()
        return ValidationError(_validation_messages(exc))

    if isinstance(exc, StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            return NotFoundError("API endpoint not found")
        if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
            return MethodNotAllowedError()
        if exc.status_code == status.HTTP_413_REQUEST_ENTITY_TOO_LARGE:
            return PayloadTooLargeError()
        if exc.status_code == status.HTTP_401_UNAUTHORIZED:
            return AuthenticationError(str(exc.detail))
        if exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR:
            return BadRequestError(str(exc.detail))
        return InternalServerError()

    if isinstance(exc, asyncpg.UniqueViolationError):
        match = _UNIQUE_DETAIL_RE.search(getattr(exc, "detail", None) or "")
        if match:
            return DuplicateKeyError(match.group("field"), match.group("value"))
        return DuplicateKeyError("value", "")

    if isinstance(exc, asyncpg.IntegrityConstraintViolationError):
        return ValidationError([getattr(exc, "message", None) or str(exc)])

    if isinstance(
        exc,
        (
            asyncpg.PostgresConnectionError,
            asyncpg.CannotConnectNowError,
            asyncpg.InterfaceError,
            asyncpg.TooManyConnectionsError,
        ),
    ):
        return DatabaseError()

    message = str(exc)
    if any(signature in message for signature in _AI_PROVIDER_SIGNATURES):
        return AIServiceError()

    if isinstance(
        exc,
        (ConnectionResetError, TimeoutError, socket.gaierror, httpx.TransportError),
    ):
        return NetworkError()

    return InternalServerError()


# =============================================================================
# Envelope
# =============================================================================


def _get_request_id(request: Request) -> str | None:
    """Extract request ID from request state."""
    return getattr(request.state, "request_id", None)


def _is_debug(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None) if "app" in request.scope else None
    return bool(settings and settings.is_development)


def build_error_envelope(
    error: AppError,
    *,
    path: str,
    method: str,
    request_id: str | None = None,
    debug: bool = False,
    cause: BaseException | None = None,
) -> dict[str, Any]:
    """Render ``error`` into the canonical error envelope.

    Outside development every 5xx carries the kind's generic message;
    ``stack`` and ``details`` are only included in development.
    """
    message = error.message
    if not debug and error.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        message = error.default_message

    body: dict[str, Any] = {
        "type": str(error.kind),
        "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
        "path": path,
        "method": method,
    }
    if request_id:
        body["requestId"] = request_id
    body.update(error.envelope_fields())

    if debug:
        origin = cause or error
        body["stack"] = "".join(
            traceback.format_exception(type(origin), origin, origin.__traceback__)
        )
        body["details"] = error.details or {
            "name": type(origin).__name__,
            "message": str(origin),
        }

    return {"success": False, "message": message, "error": body}


def error_response(
    request: Request,
    error: AppError,
    *,
    debug: bool | None = None,
    cause: BaseException | None = None,
) -> ORJSONResponse:
    """Build the JSON response for ``error`` in the context of ``request``."""
    path = request.url.path
    if request.url.query:
        path = f"{path}?{request.url.query}"
    content = build_error_envelope(
        error,
        path=path,
        method=request.method,
        request_id=_get_request_id(request),
        debug=_is_debug(request) if debug is None else debug,
        cause=cause,
    )
    headers = None
    if isinstance(error, RateLimitError):
        headers = {"Retry-After": str(error.retry_after)}
    return ORJSONResponse(status_code=error.status_code, content=content, headers=headers)


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def _log_error(request: Request, exc: BaseException, error: AppError) -> None:
    debug = _is_debug(request)
    context = {
        "url": str(request.url),
        "method": request.method,
        "client_ip": _client_ip(request),
        "user_agent": request.headers.get("User-Agent", ""),
        "error_name": type(exc).__name__,
        "error_message": str(exc),
        "status_code": error.status_code,
    }
    if error.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        log = logger.opt(exception=exc) if debug else logger
        log.error("Request failed", **context)
    else:
        logger.warning("Request rejected", **context)


# =============================================================================
# Handlers
# =============================================================================


async def handle_exception(request: Request, exc: Exception) -> ORJSONResponse:
    """Translate any exception into the canonical error envelope."""
    error = classify_exception(exc)
    _log_error(request, exc, error)
    return error_response(request, error, cause=exc)


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with the FastAPI application."""
    app.add_exception_handler(AppError, handle_exception)
    app.add_exception_handler(StarletteHTTPException, handle_exception)
    app.add_exception_handler(RequestValidationError, handle_exception)
    app.add_exception_handler(asyncpg.PostgresError, handle_exception)
    app.add_exception_handler(asyncpg.InterfaceError, handle_exception)
    app.add_exception_handler(Exception, handle_exception)


__all__ = [
    "AIServiceError",
    "AppError",
    "AuthenticationError",
    "BadRequestError",
    "DatabaseError",
    "DuplicateKeyError",
    "ErrorKind",
    "ForbiddenError",
    "InternalServerError",
    "InvalidJSONError",
    "MethodNotAllowedError",
    "NetworkError",
    "NotFoundError",
    "PayloadTooLargeError",
    "RateLimitError",
    "RequestTimeoutError",
    "UnsupportedMediaTypeError",
    "UploadError",
    "ValidationError",
    "build_error_envelope",
    "classify_exception",
    "error_response",
    "handle_exception",
    "setup_exception_handlers",
]
