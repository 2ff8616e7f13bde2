"""Integration test fixtures.

Provides fixtures for integration testing with a real PostgreSQL server via
testcontainers. Each test gets a fresh pool on emptied tables.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from testcontainers.postgres import PostgresContainer

import pantry_chef.database.connection as db_module
from pantry_chef.core.config import Settings
from pantry_chef.database.connection import close_database_pool, init_database_pool
from pantry_chef.database.repositories import (
    RecipeRepository,
    SavedRecipeRepository,
    UserRepository,
)
from pantry_chef.factory import create_app
from pantry_chef.llm.client.protocol import LLMClientProtocol
from pantry_chef.llm.models import LLMCompletionResult
from tests.fixtures.llm_responses import RECIPE_REPLY_TEXT


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Generator

    from asyncpg import Pool
    from fastapi import FastAPI


pytestmark = pytest.mark.integration

INTEGRATION_JWT_SECRET = "integration-secret-key-minimum-32-chars"  # noqa: S105


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer]:
    """Start a PostgreSQL container for the test session."""
    with PostgresContainer("postgres:16-alpine") as postgres:
        yield postgres


@pytest.fixture(scope="session")
def database_url(postgres_container: PostgresContainer) -> str:
    """asyncpg DSN for the container database."""
    host = postgres_container.get_container_host_ip()
    port = postgres_container.get_exposed_port(5432)
    return f"postgresql://test:test@{host}:{port}/test"


@pytest.fixture
def test_settings(database_url: str) -> Settings:
    """Settings pointing at the container database."""
    return Settings(
        APP_ENV="test",
        JWT_SECRET_KEY=INTEGRATION_JWT_SECRET,
        DATABASE_URL=database_url,
        AZURE_OPENAI_API_KEY="",
        database={"create_schema": True, "max_pool_size": 4},
        rate_limiting={"enabled": False},
        auth={"bcrypt_rounds": 4},
        observability={"metrics": {"enabled": False}},
    )


@pytest.fixture
async def pool(test_settings: Settings) -> AsyncGenerator[Pool]:
    """Open the global pool, apply the schema and empty every table."""
    db_module._pool = None
    database_pool = await init_database_pool(test_settings)
    async with database_pool.acquire() as conn:
        await conn.execute(
            "TRUNCATE saved_recipes, recipe_ratings, recipes, users RESTART IDENTITY CASCADE"
        )
    try:
        yield database_pool
    finally:
        await close_database_pool()


@pytest.fixture
def user_repository(pool: Pool) -> UserRepository:
    return UserRepository(pool)


@pytest.fixture
def recipe_repository(pool: Pool) -> RecipeRepository:
    return RecipeRepository(pool)


@pytest.fixture
def saved_repository(pool: Pool) -> SavedRecipeRepository:
    return SavedRecipeRepository(pool)


@pytest.fixture
def llm_client() -> MagicMock:
    """Chat-completion double that always replies with a valid recipe."""
    client = MagicMock(spec=LLMClientProtocol)
    client.is_configured = True
    client.generate = AsyncMock(
        return_value=LLMCompletionResult(
            raw_response=RECIPE_REPLY_TEXT,
            model="gpt-35-turbo",
            prompt_tokens=120,
            completion_tokens=480,
        )
    )
    client.check_connectivity = AsyncMock(return_value=True)
    return client


@pytest.fixture
def app(test_settings: Settings, pool: Pool, llm_client: MagicMock) -> FastAPI:
    """Application using the container database.

    The lifespan is not run; the pool fixture has already opened the global
    pool the repositories fall back to.
    """
    application = create_app(test_settings)
    application.state.llm_client = llm_client
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

