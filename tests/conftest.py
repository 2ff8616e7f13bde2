"""Shared test fixtures and configuration for the Pantry Chef service tests.

This module provides pytest fixtures that are used across multiple test modules,
including settings, stored-row factories and the test client with its
repository doubles.
"""

from __future__ import annotations

import os


# Select the test overlay before any settings are loaded
os.environ["APP_ENV"] = "test"

from collections.abc import Iterator
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from pantry_chef.api.dependencies import (
    get_generation_service,
    get_recipe_matcher,
    get_recipe_repository,
    get_saved_recipe_repository,
    get_user_repository,
)
from pantry_chef.auth.jwt import create_access_token
from pantry_chef.core.config import Settings
from pantry_chef.database.repositories import (
    RecipeRepository,
    SavedRecipeRepository,
    UserRepository,
)
from pantry_chef.factory import create_app
from pantry_chef.services.generation import RecipeGenerationService
from pantry_chef.services.matching import RecipeMatcher


TEST_JWT_SECRET = "test-secret-key-minimum-32-characters-long"  # noqa: S105


@pytest.fixture
def test_settings() -> Settings:
    """Settings for the test environment with rate limiting switched off."""
    return Settings(
        APP_ENV="test",
        JWT_SECRET_KEY=TEST_JWT_SECRET,
        AZURE_OPENAI_API_KEY="",
        rate_limiting={"enabled": False},
        auth={"bcrypt_rounds": 4},
        observability={"metrics": {"enabled": False}},
    )


# =============================================================================
# Repository doubles
# =============================================================================


@pytest.fixture
def mock_user_repository() -> MagicMock:
    repository = MagicMock(spec=UserRepository)
    repository.create = AsyncMock()
    repository.get_by_id = AsyncMock(return_value=None)
    repository.get_by_email = AsyncMock(return_value=None)
    repository.update_profile = AsyncMock()
    repository.update_password_hash = AsyncMock()
    repository.touch_last_login = AsyncMock(return_value=None)
    return repository


@pytest.fixture
def mock_recipe_repository() -> MagicMock:
    repository = MagicMock(spec=RecipeRepository)
    repository.create = AsyncMock()
    repository.get_by_id = AsyncMock(return_value=None)
    repository.get_many = AsyncMock(return_value=[])
    repository.increment_views = AsyncMock(return_value=1)
    repository.list_public = AsyncMock(return_value=([], 0))
    repository.find_match_candidates = AsyncMock(return_value=[])
    repository.upsert_rating = AsyncMock()
    repository.get_rating = AsyncMock(return_value=None)
    return repository


@pytest.fixture
def mock_saved_repository() -> MagicMock:
    repository = MagicMock(spec=SavedRecipeRepository)
    repository.save = AsyncMock(return_value=True)
    repository.unsave = AsyncMock(return_value=True)
    repository.is_saved = AsyncMock(return_value=False)
    repository.list_ids = AsyncMock(return_value=[])
    repository.count = AsyncMock(return_value=0)
    repository.list_recipes = AsyncMock(return_value=([], 0))
    repository.list_summaries = AsyncMock(return_value=[])
    return repository


@pytest.fixture
def mock_generation_service() -> MagicMock:
    service = MagicMock(spec=RecipeGenerationService)
    service.generate = AsyncMock()
    return service


# =============================================================================
# Application
# =============================================================================


@pytest.fixture
def app(
    test_settings: Settings,
    mock_user_repository: MagicMock,
    mock_recipe_repository: MagicMock,
    mock_saved_repository: MagicMock,
    mock_generation_service: MagicMock,
) -> FastAPI:
    """Application wired to repository doubles.

    The lifespan is not entered, so no database pool or AI client is opened.
    """
    application = create_app(test_settings)
    application.dependency_overrides[get_user_repository] = lambda: mock_user_repository
    application.dependency_overrides[get_recipe_repository] = lambda: mock_recipe_repository
    application.dependency_overrides[get_saved_recipe_repository] = (
        lambda: mock_saved_repository
    )
    application.dependency_overrides[get_recipe_matcher] = lambda: RecipeMatcher(
        mock_recipe_repository
    )
    application.dependency_overrides[get_generation_service] = lambda: mock_generation_service
    return application


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    yield TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def auth_headers(test_settings: Settings) -> Any:
    """Build bearer headers for a user id."""

    def _headers(user_id: str) -> dict[str, str]:
        token = create_access_token(user_id, settings=test_settings)
        return {"Authorization": f"Bearer {token}"}

    return _headers
