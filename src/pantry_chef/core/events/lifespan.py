"""Application lifespan event handlers.

This module defines the lifespan context manager that handles:
- Application startup: logging, database pool, Azure OpenAI client
- Application shutdown: close the HTTP client and the database pool
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import asyncpg

from pantry_chef.database.connection import close_database_pool, init_database_pool
from pantry_chef.llm.client.azure_openai import AzureOpenAIClient
from pantry_chef.observability.logging import get_logger, setup_logging


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from fastapi import FastAPI

    from pantry_chef.core.config import Settings

logger = get_logger(__name__)


async def _startup(app: FastAPI, settings: Settings) -> None:
    """Initialize all application services during startup.

    Args:
        app: The FastAPI application instance.
        settings: Application settings.
    """
    setup_logging(
        log_level=settings.logging.level,
        log_format=settings.logging.format,
        is_development=settings.is_development,
    )

    logger.info(
        "Starting application",
        app_name=settings.app.name,
        environment=settings.APP_ENV,
        debug=settings.app.debug,
    )

    await _init_database(settings)

    # The client is always created; without credentials it stays idle and
    # generation requests fail with an AI service error
    llm_client = AzureOpenAIClient.from_settings(settings)
    await llm_client.initialize()
    app.state.llm_client = llm_client

    logger.info("Application startup complete")


async def _init_database(settings: Settings) -> None:
    """Open the database pool.

    Outside production the service keeps running without a database; requests
    that need it fail with a database error and the health check reports it.
    """
    try:
        await init_database_pool(settings)
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError):
        if settings.is_production:
            logger.critical("Database unavailable - refusing to start")
            raise
        logger.warning("Database not available - continuing without database")


async def _shutdown(app: FastAPI) -> None:
    """Shutdown all application services.

    Args:
        app: The FastAPI application instance.
    """
    logger.info("Shutting down application")

    llm_client = getattr(app.state, "llm_client", None)
    if llm_client is not None:
        await llm_client.shutdown()
        app.state.llm_client = None

    await close_database_pool()

    logger.info("Application shutdown complete")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan events.

    Args:
        app: The FastAPI application instance. Its settings are read from
            ``app.state.settings``.

    Yields:
        None - control returns to the application to handle requests.
    """
    settings: Settings = app.state.settings
    await _startup(app, settings)
    try:
        yield
    finally:
        await _shutdown(app)
