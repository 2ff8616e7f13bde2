"""PostgreSQL connection pool management.

This module provides:
- Async connection pool management via asyncpg
- JSONB codecs backed by orjson
- Connection lifecycle management via lifespan events
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import asyncpg
import orjson

from pantry_chef.core.exceptions import DatabaseError
from pantry_chef.database.schema import apply_schema
from pantry_chef.observability.logging import get_logger


if TYPE_CHECKING:
    from asyncpg import Connection, Pool

    from pantry_chef.core.config import Settings

logger = get_logger(__name__)

# Global connection pool
_pool: Pool | None = None


def _encode_json(value: object) -> str:
    return orjson.dumps(value).decode()


async def _init_connection(conn: Connection) -> None:
    """Register JSON codecs so JSONB columns round-trip as Python objects."""
    for type_name in ("json", "jsonb"):
        await conn.set_type_codec(
            type_name,
            encoder=_encode_json,
            decoder=orjson.loads,
            schema="pg_catalog",
        )


async def init_database_pool(settings: Settings) -> Pool:
    """Initialize PostgreSQL connection pool.

    Should be called during application startup (lifespan). The schema is
    applied when ``database.create_schema`` is enabled.
    """
    global _pool  # noqa: PLW0603

    config = settings.database
    logger.info(
        "Initializing database connection pool",
        host=config.host,
        port=config.port,
        database=config.name,
    )

    _pool = await asyncpg.create_pool(
        dsn=settings.database_url,
        min_size=config.min_pool_size,
        max_size=config.max_pool_size,
        command_timeout=config.command_timeout,
        timeout=config.connect_timeout,
        ssl="require" if config.ssl else None,
        init=_init_connection,
    )

    try:
        async with _pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
            if config.create_schema:
                await apply_schema(conn)
        logger.info("Database connection established successfully")
    except asyncpg.PostgresError:
        logger.exception("Failed to connect to database")
        await close_database_pool()
        raise

    return _pool


async def close_database_pool() -> None:
    """Close PostgreSQL connection pool.

    Should be called during application shutdown (lifespan).
    """
    global _pool  # noqa: PLW0603

    if _pool:
        logger.info("Closing database connection pool")
        await _pool.close()
        _pool = None
        logger.info("Database connection pool closed")


def get_database_pool() -> Pool:
    """Get the database connection pool.

    Raises:
        DatabaseError: If the pool is not initialized.
    """
    if _pool is None:
        msg = "Database pool not initialized"
        raise DatabaseError(msg)
    return _pool


async def check_database_health() -> bool:
    """Whether a pooled connection can run a trivial query."""
    if _pool is None:
        return False
    try:
        async with _pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
        logger.warning("Database health check failed", error=str(e))
        return False
    return True
