"""Unit tests for request ID middleware.

Tests cover:
- Request ID generation
- Request ID propagation from headers
- Response header addition
- Request state storage
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from pantry_chef.core.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware


pytestmark = pytest.mark.unit


class TestRequestIDMiddleware:
    """Tests for RequestIDMiddleware."""

    def test_init_default_header(self) -> None:
        """Should use default header name."""
        middleware = RequestIDMiddleware(MagicMock())
        assert middleware.header_name == REQUEST_ID_HEADER

    async def test_generates_request_id_when_missing(self) -> None:
        """Should generate a new id when no request ID header is present."""
        middleware = RequestIDMiddleware(MagicMock())

        request = MagicMock()
        request.headers = {}
        request.state = MagicMock()

        response = MagicMock()
        response.headers = {}

        call_next = AsyncMock(return_value=response)

        with (
            patch("pantry_chef.core.middleware.request_id.clear_context"),
            patch("pantry_chef.core.middleware.request_id.bind_context") as mock_bind,
        ):
            result = await middleware.dispatch(request, call_next)

        generated = result.headers[REQUEST_ID_HEADER]
        assert len(generated) == 32
        assert request.state.request_id == generated
        mock_bind.assert_called_once_with(request_id=generated)

    async def test_propagates_existing_request_id(self) -> None:
        """Should use existing request ID from header."""
        middleware = RequestIDMiddleware(MagicMock())

        request = MagicMock()
        request.headers = {REQUEST_ID_HEADER: "existing-request-id-123"}
        request.state = MagicMock()

        response = MagicMock()
        response.headers = {}

        with (
            patch("pantry_chef.core.middleware.request_id.clear_context") as mock_clear,
            patch("pantry_chef.core.middleware.request_id.bind_context"),
        ):
            result = await middleware.dispatch(request, AsyncMock(return_value=response))

        mock_clear.assert_called_once()
        assert request.state.request_id == "existing-request-id-123"
        assert result.headers[REQUEST_ID_HEADER] == "existing-request-id-123"
