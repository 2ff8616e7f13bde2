"""Saved-recipe repository.

The relation between users and the recipes they saved is stored once, in the
``saved_recipes`` join table, and read from either side.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import BaseModel

from pantry_chef.database.connection import get_database_pool
from pantry_chef.database.repositories.recipe import (
    RECIPE_COLUMNS,
    RecipeRecord,
    order_by_clause,
)
from pantry_chef.observability.logging import get_logger


if TYPE_CHECKING:
    from asyncpg import Pool

logger = get_logger(__name__)


class SavedRecipeSummaryRecord(BaseModel):
    """The columns shown for a saved recipe on a public profile."""

    id: UUID
    title: str
    description: str
    average_rating: float
    total_time: int


class SavedRecipeRepository:
    """Repository for the user/recipe save relation."""

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

    async def save(self, user_id: UUID, recipe_id: UUID) -> bool:
        """Record the save.

        Returns:
            False if the recipe was already saved by the user.
        """
        query = """
            INSERT INTO saved_recipes (user_id, recipe_id)
            VALUES ($1, $2)
            ON CONFLICT (user_id, recipe_id) DO NOTHING
            RETURNING recipe_id
        """
        async with self.pool.acquire() as conn:
            inserted = await conn.fetchval(query, user_id, recipe_id)
        return inserted is not None

    async def unsave(self, user_id: UUID, recipe_id: UUID) -> bool:
        """Remove the save; returns whether a row existed."""
        query = "DELETE FROM saved_recipes WHERE user_id = $1 AND recipe_id = $2"
        async with self.pool.acquire() as conn:
            status = await conn.execute(query, user_id, recipe_id)
        return status != "DELETE 0"

    async def is_saved(self, user_id: UUID, recipe_id: UUID) -> bool:
        query = """
            SELECT EXISTS (
                SELECT 1 FROM saved_recipes WHERE user_id = $1 AND recipe_id = $2
            )
        """
        async with self.pool.acquire() as conn:
            return bool(await conn.fetchval(query, user_id, recipe_id))

    async def list_ids(self, user_id: UUID) -> list[UUID]:
        """Ids of the user's saved recipes, most recently saved first."""
        query = """
            SELECT recipe_id FROM saved_recipes
            WHERE user_id = $1
            ORDER BY created_at DESC
        """
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query, user_id)
        return [row["recipe_id"] for row in rows]

    async def count(self, user_id: UUID) -> int:
        async with self.pool.acquire() as conn:
            return await conn.fetchval(
                "SELECT count(*) FROM saved_recipes WHERE user_id = $1", user_id
            )

    async def list_recipes(
        self,
        user_id: UUID,
        *,
        sort_by: str,
        sort_order: str,
        skip: int,
        limit: int,
    ) -> tuple[list[RecipeRecord], int]:
        """One page of the user's saved recipes plus the total saved."""
        query = f"""
            SELECT {RECIPE_COLUMNS}
            FROM saved_recipes s
            JOIN recipes r ON r.id = s.recipe_id
            WHERE s.user_id = $1
            {order_by_clause(sort_by, sort_order)}
            OFFSET $2 LIMIT $3
        """
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query, user_id, skip, limit)
            total = await conn.fetchval(
                "SELECT count(*) FROM saved_recipes WHERE user_id = $1", user_id
            )
        return [RecipeRecord(**dict(row)) for row in rows], total

    async def list_summaries(self, user_id: UUID) -> list[SavedRecipeSummaryRecord]:
        query = """
            SELECT r.id, r.title, r.description, r.average_rating, r.total_time
            FROM saved_recipes s
            JOIN recipes r ON r.id = s.recipe_id
            WHERE s.user_id = $1
            ORDER BY s.created_at DESC
        """
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query, user_id)
        return [SavedRecipeSummaryRecord(**dict(row)) for row in rows]
