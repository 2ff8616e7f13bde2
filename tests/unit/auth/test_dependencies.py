"""Unit tests for authentication dependencies.

Tests cover:
- Required authentication
- Optional authentication
"""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from fastapi.security import HTTPAuthorizationCredentials

from pantry_chef.auth.dependencies import (
    NO_TOKEN_MESSAGE,
    get_current_user_id,
    get_optional_user_id,
)
from pantry_chef.auth.jwt import create_access_token
from pantry_chef.core.config import Settings
from pantry_chef.core.exceptions import AuthenticationError


pytestmark = pytest.mark.unit


@pytest.fixture
def auth_settings() -> Settings:
    return Settings(JWT_SECRET_KEY="test-secret-key-minimum-32-characters-long")


@pytest.fixture
def mock_request(auth_settings: Settings) -> MagicMock:
    request = MagicMock()
    request.app.state.settings = auth_settings
    return request


def _bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestGetCurrentUserId:
    """Tests for get_current_user_id."""

    async def test_returns_subject(
        self, mock_request: MagicMock, auth_settings: Settings
    ) -> None:
        token = create_access_token("user-123", settings=auth_settings)

        user_id = await get_current_user_id(mock_request, _bearer(token))

        assert user_id == "user-123"
        assert mock_request.state.user_id == "user-123"

    async def test_missing_token(self, mock_request: MagicMock) -> None:
        with pytest.raises(AuthenticationError) as exc_info:
            await get_current_user_id(mock_request, None)

        assert exc_info.value.message == NO_TOKEN_MESSAGE
        assert exc_info.value.status_code == 401

    async def test_invalid_token(self, mock_request: MagicMock) -> None:
        with pytest.raises(AuthenticationError) as exc_info:
            await get_current_user_id(mock_request, _bearer("garbage"))

        assert exc_info.value.message == AuthenticationError.INVALID_TOKEN

    async def test_expired_token(
        self, mock_request: MagicMock, auth_settings: Settings
    ) -> None:
        token = create_access_token(
            "user-123", settings=auth_settings, expires_delta=timedelta(seconds=-1)
        )

        with pytest.raises(AuthenticationError) as exc_info:
            await get_current_user_id(mock_request, _bearer(token))

        assert exc_info.value.message == AuthenticationError.EXPIRED_TOKEN


class TestGetOptionalUserId:
    """Tests for get_optional_user_id."""

    async def test_anonymous(self, mock_request: MagicMock) -> None:
        assert await get_optional_user_id(mock_request, None) is None

    async def test_invalid_token_is_anonymous(self, mock_request: MagicMock) -> None:
        """Should proceed anonymously instead of rejecting."""
        assert await get_optional_user_id(mock_request, _bearer("garbage")) is None

    async def test_valid_token(
        self, mock_request: MagicMock, auth_settings: Settings
    ) -> None:
        token = create_access_token("user-123", settings=auth_settings)

        assert await get_optional_user_id(mock_request, _bearer(token)) == "user-123"
