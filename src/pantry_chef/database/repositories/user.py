"""User repository.

Provides data access for user accounts stored in PostgreSQL.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

from pydantic import BaseModel

from pantry_chef.database.connection import get_database_pool
from pantry_chef.database.ids import new_id
from pantry_chef.observability.logging import get_logger


if TYPE_CHECKING:
    from asyncpg import Pool, Record

logger = get_logger(__name__)


# =============================================================================
# Data Transfer Objects
# =============================================================================


class UserRecord(BaseModel):
    """A row of the ``users`` table."""

    id: UUID
    name: str
    email: str
    password_hash: str
    avatar: str | None
    preferences: dict[str, Any]
    is_active: bool
    created_at: datetime
    updated_at: datetime
    last_login_at: datetime | None


# =============================================================================
# Repository
# =============================================================================


_USER_COLUMNS = """
    id, name, email, password_hash, avatar, preferences, is_active,
    created_at, updated_at, last_login_at
"""


class UserRepository:
    """Repository for user accounts."""

    def __init__(self, pool: Pool | None = None) -> None:
        """Initialize repository with optional connection pool.

        Args:
            pool: asyncpg connection pool. If None, uses global pool.
        """
        self._pool = pool

    @property
    def pool(self) -> Pool:
        """Get the database connection pool."""
        if self._pool is not None:
            return self._pool
        return get_database_pool()

    async def create(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        preferences: dict[str, Any],
    ) -> UserRecord:
        """Insert a new user.

        Raises:
            asyncpg.UniqueViolationError: If the email is already registered.
        """
        query = f"""
            INSERT INTO users (id, name, email, password_hash, preferences, last_login_at)
            VALUES ($1, $2, $3, $4, $5, now())
            RETURNING {_USER_COLUMNS}
        """
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                query, new_id(), name, email.lower(), password_hash, preferences
            )
        logger.info("User created", user_id=str(row["id"]))
        return self._row_to_user(row)

    async def get_by_id(self, user_id: UUID) -> UserRecord | None:
        query = f"SELECT {_USER_COLUMNS} FROM users WHERE id = $1"
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, user_id)
        return self._row_to_user(row) if row else None

    async def get_by_email(self, email: str) -> UserRecord | None:
        query = f"SELECT {_USER_COLUMNS} FROM users WHERE email = $1"
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, email.lower())
        return self._row_to_user(row) if row else None

    async def update_profile(
        self,
        user_id: UUID,
        *,
        name: str | None = None,
        preferences: dict[str, Any] | None = None,
        avatar: str | None = None,
    ) -> UserRecord | None:
        """Update the provided profile fields; omitted fields are unchanged."""
        updates: dict[str, Any] = {
            column: value
            for column, value in (
                ("name", name),
                ("preferences", preferences),
                ("avatar", avatar),
            )
            if value is not None
        }
        if not updates:
            return await self.get_by_id(user_id)

        assignments = ", ".join(
            f"{column} = ${index}" for index, column in enumerate(updates, start=2)
        )
        query = f"""
            UPDATE users SET {assignments}, updated_at = now()
            WHERE id = $1
            RETURNING {_USER_COLUMNS}
        """
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, user_id, *updates.values())
        return self._row_to_user(row) if row else None

    async def update_password_hash(self, user_id: UUID, password_hash: str) -> None:
        query = """
            UPDATE users SET password_hash = $2, updated_at = now()
            WHERE id = $1
        """
        async with self.pool.acquire() as conn:
            await conn.execute(query, user_id, password_hash)

    async def touch_last_login(self, user_id: UUID) -> UserRecord | None:
        query = f"""
            UPDATE users SET last_login_at = now()
            WHERE id = $1
            RETURNING {_USER_COLUMNS}
        """
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, user_id)
        return self._row_to_user(row) if row else None

    def _row_to_user(self, row: Record) -> UserRecord:
        return UserRecord(**dict(row))
