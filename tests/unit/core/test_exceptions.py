"""Unit tests for the error taxonomy and exception handlers.

Tests cover:
- Error classes and their envelope fields
- Exception classification
- Error envelope rendering
- Exception handlers on a FastAPI app
"""

from __future__ import annotations

import socket

import asyncpg
import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from pantry_chef.core.config import Settings
from pantry_chef.core.exceptions import (
    AIServiceError,
    AppError,
    AuthenticationError,
    BadRequestError,
    DatabaseError,
    DuplicateKeyError,
    ErrorKind,
    InternalServerError,
    MethodNotAllowedError,
    NetworkError,
    NotFoundError,
    PayloadTooLargeError,
    RateLimitError,
    RequestTimeoutError,
    UploadError,
    ValidationError,
    build_error_envelope,
    classify_exception,
    setup_exception_handlers,
)
from pantry_chef.services.generation import RecipeGenerationError


pytestmark = pytest.mark.unit


# =============================================================================
# Error classes
# =============================================================================


class TestErrorClasses:
    """Tests for the application error classes."""

    def test_default_message(self) -> None:
        """Should fall back to the kind's default message."""
        error = NotFoundError()

        assert error.message == "Resource not found."
        assert error.status_code == 404
        assert error.kind is ErrorKind.NOT_FOUND

    def test_not_found_for_id(self) -> None:
        assert NotFoundError.for_id("abc").message == "Resource not found with id: abc"

    def test_validation_joins_messages(self) -> None:
        """Should join individual messages with a comma."""
        error = ValidationError(["name is too short", "email is invalid"])

        assert error.message == "name is too short, email is invalid"
        assert error.details == {"errors": ["name is too short", "email is invalid"]}

    def test_duplicate_key_message(self) -> None:
        """Should capitalize the field name in the message."""
        error = DuplicateKeyError("email", "jane@example.com")

        assert error.message == "Email 'jane@example.com' already exists"
        assert error.status_code == 400

    def test_upload_reason_messages(self) -> None:
        assert UploadError("file_size").message.startswith("File size too large")
        assert UploadError("file_count").message == "Too many files uploaded."

    def test_rate_limit_envelope_fields(self) -> None:
        assert RateLimitError(retry_after=12).envelope_fields() == {"retryAfter": 12}

    def test_timeout_envelope_fields(self) -> None:
        error = RequestTimeoutError(30_000)

        assert error.status_code == 408
        assert error.envelope_fields() == {"timeout": 30_000}


# =============================================================================
# Classification
# =============================================================================


class TestClassifyException:
    """Tests for classify_exception."""

    def test_app_errors_pass_through(self) -> None:
        error = BadRequestError("Recipe already saved")
        assert classify_exception(error) is error

    @pytest.mark.parametrize(
        ("status_code", "expected"),
        [
            (404, NotFoundError),
            (405, MethodNotAllowedError),
            (413, PayloadTooLargeError),
            (401, AuthenticationError),
            (418, BadRequestError),
            (502, InternalServerError),
        ],
    )
    def test_http_exceptions(self, status_code: int, expected: type[AppError]) -> None:
        """Should map framework HTTP errors by status code."""
        error = classify_exception(StarletteHTTPException(status_code, detail="x"))
        assert type(error) is expected

    def test_unmatched_route_message(self) -> None:
        error = classify_exception(StarletteHTTPException(404))
        assert error.message == "API endpoint not found"

    def test_unique_violation_extracts_field(self) -> None:
        """Should read the field and value from the store's detail text."""
        exc = asyncpg.UniqueViolationError("duplicate key value")
        exc.detail = "Key (email)=(jane@example.com) already exists."

        error = classify_exception(exc)

        assert isinstance(error, DuplicateKeyError)
        assert error.field == "email"
        assert error.value == "jane@example.com"

    def test_check_violation_is_validation(self) -> None:
        error = classify_exception(asyncpg.CheckViolationError("rating out of range"))

        assert isinstance(error, ValidationError)
        assert error.status_code == 400

    @pytest.mark.parametrize(
        "exc",
        [
            asyncpg.PostgresConnectionError("gone"),
            asyncpg.CannotConnectNowError("starting up"),
            asyncpg.InterfaceError("pool is closed"),
            asyncpg.TooManyConnectionsError("too many"),
        ],
    )
    def test_store_unavailable(self, exc: Exception) -> None:
        assert isinstance(classify_exception(exc), DatabaseError)

    def test_ai_provider_signature(self) -> None:
        """Should treat errors naming the AI provider as AI service errors."""
        exc = RecipeGenerationError("Failed to generate recipe: Azure OpenAI timeout after 50s")
        assert isinstance(classify_exception(exc), AIServiceError)

    @pytest.mark.parametrize(
        "exc",
        [
            ConnectionResetError(),
            TimeoutError(),
            socket.gaierror(),
            httpx.ConnectError("refused"),
        ],
    )
    def test_transport_errors(self, exc: Exception) -> None:
        assert isinstance(classify_exception(exc), NetworkError)

    @pytest.mark.parametrize(
        ("message", "reason"),
        [
            ("Too many files. Maximum number of files is 1.", "file_count"),
            ("Part exceeded maximum size of 1024KB.", "file_size"),
            ('The Content-Disposition header field "name" must be provided.', "unexpected_file"),
            ("Missing boundary in multipart.", "malformed"),
        ],
    )
    def test_multipart_errors_are_upload_errors(self, message: str, reason: str) -> None:
        error = classify_exception(MultiPartException(message))

        assert isinstance(error, UploadError)
        assert error.reason == reason
        assert error.status_code == 400

    def test_http_error_raised_from_multipart_parser(self) -> None:
        """Should see through the 400 the framework raises while parsing a form."""
        try:
            try:
                raise MultiPartException("Too many files. Maximum number of files is 1.")
            except MultiPartException as exc:
                raise StarletteHTTPException(400, detail=exc.message) from exc
        except StarletteHTTPException as http_exc:
            error = classify_exception(http_exc)

        assert isinstance(error, UploadError)
        assert error.message == "Too many files uploaded."
        assert error.details == {"reason": "file_count"}

    def test_everything_else_is_internal(self) -> None:
        assert isinstance(classify_exception(KeyError("boom")), InternalServerError)


# =============================================================================
# Envelope
# =============================================================================


class TestBuildErrorEnvelope:
    """Tests for build_error_envelope."""

    def test_shape(self) -> None:
        """Should render the canonical envelope."""
        envelope = build_error_envelope(
            NotFoundError("Recipe not found"),
            path="/api/recipes/1",
            method="GET",
            request_id="req-1",
        )

        assert envelope["success"] is False
        assert envelope["message"] == "Recipe not found"
        error = envelope["error"]
        assert error["type"] == "NotFoundError"
        assert error["path"] == "/api/recipes/1"
        assert error["method"] == "GET"
        assert error["requestId"] == "req-1"
        assert error["timestamp"].endswith("Z")
        assert "stack" not in error
        assert "details" not in error

    def test_hides_server_error_messages_outside_development(self) -> None:
        """Should replace 5xx messages with the generic text."""
        envelope = build_error_envelope(
            InternalServerError("connection string leaked"), path="/", method="GET"
        )
        assert envelope["message"] == InternalServerError.default_message

    def test_keeps_server_error_messages_in_development(self) -> None:
        envelope = build_error_envelope(
            InternalServerError("connection string leaked"),
            path="/",
            method="GET",
            debug=True,
        )

        assert envelope["message"] == "connection string leaked"
        assert "stack" in envelope["error"]
        assert envelope["error"]["details"]["name"] == "InternalServerError"

    def test_kind_specific_fields(self) -> None:
        envelope = build_error_envelope(
            RateLimitError(retry_after=30), path="/api/auth/login", method="POST"
        )
        assert envelope["error"]["retryAfter"] == 30

    def test_omits_missing_request_id(self) -> None:
        envelope = build_error_envelope(NotFoundError(), path="/", method="GET")
        assert "requestId" not in envelope["error"]


# =============================================================================
# Handlers
# =============================================================================


class _Body(BaseModel):
    title: str


@pytest.fixture
def error_app() -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)
    app.add_exception_handler(RecipeGenerationError, app.exception_handlers[AppError])

    @app.get("/not-found")
    async def not_found() -> None:
        raise NotFoundError("Recipe not found")

    @app.get("/limited")
    async def limited() -> None:
        raise RateLimitError("Slow down", retry_after=42)

    @app.get("/boom")
    async def boom() -> None:
        raise RuntimeError("secret internals")

    @app.get("/ai")
    async def ai() -> None:
        raise RecipeGenerationError("Failed to generate recipe: Azure OpenAI returned 500")

    @app.post("/items")
    async def create_item(body: _Body) -> dict[str, str]:
        return {"title": body.title}

    return app


class TestExceptionHandlers:
    """Tests for the registered exception handlers."""

    def test_app_error(self, error_app: FastAPI) -> None:
        client = TestClient(error_app)

        response = client.get("/not-found")

        assert response.status_code == 404
        body = response.json()
        assert body["message"] == "Recipe not found"
        assert body["error"]["type"] == "NotFoundError"

    def test_unmatched_route(self, error_app: FastAPI) -> None:
        response = TestClient(error_app).get("/nowhere?x=1")

        assert response.status_code == 404
        body = response.json()
        assert body["message"] == "API endpoint not found"
        assert body["error"]["path"] == "/nowhere?x=1"

    def test_rate_limit_sets_retry_after(self, error_app: FastAPI) -> None:
        response = TestClient(error_app).get("/limited")

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "42"
        assert response.json()["error"]["retryAfter"] == 42

    def test_unclassified_error(self, error_app: FastAPI) -> None:
        """Should answer 500 with the generic message."""
        response = TestClient(error_app, raise_server_exceptions=False).get("/boom")

        assert response.status_code == 500
        body = response.json()
        assert body["error"]["type"] == "InternalServerError"
        assert "secret" not in body["message"]

    def test_development_includes_stack(self, error_app: FastAPI) -> None:
        error_app.state.settings = Settings(APP_ENV="development")

        response = TestClient(error_app, raise_server_exceptions=False).get("/boom")

        body = response.json()
        assert body["message"] == "secret internals"
        assert "RuntimeError" in body["error"]["stack"]

    def test_ai_failure(self, error_app: FastAPI) -> None:
        response = TestClient(error_app).get("/ai")

        assert response.status_code == 503
        assert response.json()["error"]["type"] == "AIServiceError"

    def test_request_validation(self, error_app: FastAPI) -> None:
        response = TestClient(error_app).post("/items", json={})

        assert response.status_code == 400
        body = response.json()
        assert body["error"]["type"] == "ValidationError"
        assert "title" in body["message"]

    def test_invalid_json(self, error_app: FastAPI) -> None:
        response = TestClient(error_app).post(
            "/items",
            content=b'{"title": ',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["type"] == "InvalidJSONError"

    def test_method_not_allowed(self, error_app: FastAPI) -> None:
        response = TestClient(error_app).delete("/not-found")

        assert response.status_code == 405
        assert response.json()["error"]["type"] == "MethodNotAllowedError"
