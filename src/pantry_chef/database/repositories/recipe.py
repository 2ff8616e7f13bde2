"""Recipe repository.

Provides data access for recipes and their ratings stored in PostgreSQL.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

from pydantic import BaseModel

from pantry_chef.database.connection import get_database_pool
from pantry_chef.database.ids import new_id
from pantry_chef.observability.logging import get_logger
from pantry_chef.schemas.enums import RecipeSortField, SortOrder


if TYPE_CHECKING:
    from asyncpg import Pool, Record

    from pantry_chef.schemas.recipe import RecipeDraft

logger = get_logger(__name__)


# =============================================================================
# Data Transfer Objects
# =============================================================================


class RecipeRecord(BaseModel):
    """A row of the ``recipes`` table."""

    id: UUID
    seq: int
    title: str
    description: str
    ingredients: list[dict[str, Any]]
    input_ingredients: list[str]
    instructions: list[dict[str, Any]]
    prep_time: int
    cook_time: int
    total_time: int
    difficulty: str
    servings: int
    cuisine: str
    meal_type: list[str]
    dietary_info: dict[str, Any]
    nutritional_info: dict[str, Any] | None
    tags: list[str]
    generated_by: str
    generation_prompt: str | None
    created_by: UUID
    is_public: bool
    average_rating: float
    total_ratings: int
    views: int
    created_at: datetime
    updated_at: datetime


class RatingRecord(BaseModel):
    """A row of the ``recipe_ratings`` table."""

    recipe_id: UUID
    user_id: UUID
    rating: int
    comment: str | None
    created_at: datetime


class RatingUpsertResult(BaseModel):
    """The stored rating and the recipe aggregates after the write."""

    rating: RatingRecord
    created: bool
    average_rating: float
    total_ratings: int


class MatchCandidate(BaseModel):
    """The columns the ingredient matcher ranks on."""

    id: UUID
    seq: int
    title: str
    input_ingredients: list[str]
    average_rating: float
    views: int
    created_at: datetime


@dataclass(frozen=True)
class RecipeFilters:
    """Filters of the public recipe listing."""

    ingredients: tuple[str, ...] = ()
    cuisine: str | None = None
    meal_type: str | None = None
    difficulty: str | None = None
    max_cooking_time: int | None = None
    is_vegetarian: bool = False
    is_vegan: bool = False
    is_gluten_free: bool = False
    search: str | None = None


# =============================================================================
# Query helpers
# =============================================================================


RECIPE_COLUMNS = """
    r.id, r.seq, r.title, r.description, r.ingredients, r.input_ingredients,
    r.instructions, r.prep_time, r.cook_time, r.total_time, r.difficulty,
    r.servings, r.cuisine, r.meal_type, r.dietary_info, r.nutritional_info,
    r.tags, r.generated_by, r.generation_prompt, r.created_by, r.is_public,
    r.average_rating, r.total_ratings, r.views, r.created_at, r.updated_at
"""

SORT_COLUMNS: dict[str, str] = {
    RecipeSortField.CREATED_AT: "r.created_at",
    RecipeSortField.AVERAGE_RATING: "r.average_rating",
    RecipeSortField.VIEWS: "r.views",
    RecipeSortField.TITLE: "r.title",
}

_SEARCH_DOCUMENT = (
    "to_tsvector('english', r.title || ' ' || r.description || ' ' || "
    "jsonb_path_query_array(r.ingredients, '$[*].name')::text)"
)


def order_by_clause(sort_by: str, sort_order: str) -> str:
    """ORDER BY for a whitelisted sort field; ties keep insertion order."""
    column = SORT_COLUMNS[RecipeSortField(sort_by)]
    direction = "ASC" if SortOrder(sort_order) is SortOrder.ASC else "DESC"
    return f"ORDER BY {column} {direction}, r.seq ASC"


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so a term matches literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains_patterns(terms: list[str] | tuple[str, ...]) -> list[str]:
    """``ILIKE`` patterns matching any value that contains one of ``terms``."""
    return [f"%{escape_like(term)}%" for term in terms]


def build_filter_clause(filters: RecipeFilters) -> tuple[str, list[Any]]:
    """WHERE clause and arguments for the public listing."""
    conditions = ["r.is_public"]
    args: list[Any] = []

    def arg(value: Any) -> str:
        args.append(value)
        return f"${len(args)}"

    if filters.ingredients:
        conditions.append(
            "EXISTS (SELECT 1 FROM unnest(r.input_ingredients) AS ing "
            f"WHERE ing ILIKE ANY({arg(contains_patterns(filters.ingredients))}::text[]))"
        )
    if filters.cuisine:
        conditions.append(f"r.cuisine ILIKE {arg(contains_patterns([filters.cuisine])[0])}")
    if filters.meal_type:
        conditions.append(f"{arg(filters.meal_type)} = ANY(r.meal_type)")
    if filters.difficulty:
        conditions.append(f"r.difficulty = {arg(filters.difficulty)}")
    if filters.max_cooking_time is not None:
        conditions.append(f"r.total_time <= {arg(filters.max_cooking_time)}")
    if filters.is_vegetarian:
        conditions.append("(r.dietary_info->>'isVegetarian')::boolean")
    if filters.is_vegan:
        conditions.append("(r.dietary_info->>'isVegan')::boolean")
    if filters.is_gluten_free:
        conditions.append("(r.dietary_info->>'isGlutenFree')::boolean")
    if filters.search:
        conditions.append(
            f"{_SEARCH_DOCUMENT} @@ websearch_to_tsquery('english', {arg(filters.search)})"
        )

    return " AND ".join(conditions), args


# =============================================================================
# Repository
# =============================================================================


class RecipeRepository:
    """Repository for recipes and recipe ratings."""

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
        draft: RecipeDraft,
        *,
        created_by: UUID,
        is_public: bool = True,
    ) -> RecipeRecord:
        """Persist a recipe. ``total_time`` is derived by the database."""
        content = draft.model_dump(mode="json", by_alias=True)
        query = f"""
            INSERT INTO recipes AS r (
                id, title, description, ingredients, input_ingredients,
                instructions, prep_time, cook_time, difficulty, servings,
                cuisine, meal_type, dietary_info, nutritional_info, tags,
                generated_by, generation_prompt, created_by, is_public
            )
            VALUES (
                $1, $2, $3, $4, $5, $6, $7, $8, $9, $10,
                $11, $12, $13, $14, $15, $16, $17, $18, $19
            )
            RETURNING {RECIPE_COLUMNS}
        """
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                query,
                new_id(),
                draft.title,
                draft.description,
                content["ingredients"],
                draft.input_ingredients,
                content["instructions"],
                draft.cooking_time.prep,
                draft.cooking_time.cook,
                draft.difficulty,
                draft.servings,
                draft.cuisine,
                list(draft.meal_type),
                content["dietaryInfo"],
                content["nutritionalInfo"],
                draft.tags,
                draft.generated_by,
                draft.generation_prompt,
                created_by,
                is_public,
            )
        logger.info("Recipe created", recipe_id=str(row["id"]), created_by=str(created_by))
        return self._row_to_recipe(row)

    async def get_by_id(self, recipe_id: UUID) -> RecipeRecord | None:
        query = f"SELECT {RECIPE_COLUMNS} FROM recipes r WHERE r.id = $1"
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, recipe_id)
        return self._row_to_recipe(row) if row else None

    async def exists(self, recipe_id: UUID) -> bool:
        async with self.pool.acquire() as conn:
            return bool(
                await conn.fetchval("SELECT EXISTS (SELECT 1 FROM recipes WHERE id = $1)", recipe_id)
            )

    async def get_many(self, recipe_ids: list[UUID]) -> list[RecipeRecord]:
        """Fetch recipes by id, returned in the order of ``recipe_ids``."""
        if not recipe_ids:
            return []
        query = f"SELECT {RECIPE_COLUMNS} FROM recipes r WHERE r.id = ANY($1::uuid[])"
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query, recipe_ids)
        by_id = {row["id"]: self._row_to_recipe(row) for row in rows}
        return [by_id[recipe_id] for recipe_id in recipe_ids if recipe_id in by_id]

    async def increment_views(self, recipe_id: UUID) -> int:
        """Atomically add one view and return the new count."""
        query = "UPDATE recipes SET views = views + 1 WHERE id = $1 RETURNING views"
        async with self.pool.acquire() as conn:
            return await conn.fetchval(query, recipe_id)

    async def list_public(
        self,
        filters: RecipeFilters,
        *,
        sort_by: str,
        sort_order: str,
        skip: int,
        limit: int,
    ) -> tuple[list[RecipeRecord], int]:
        """One page of public recipes plus the total number matching."""
        where, args = build_filter_clause(filters)
        query = f"""
            SELECT {RECIPE_COLUMNS} FROM recipes r
            WHERE {where}
            {order_by_clause(sort_by, sort_order)}
            OFFSET ${len(args) + 1} LIMIT ${len(args) + 2}
        """
        count_query = f"SELECT count(*) FROM recipes r WHERE {where}"

        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query, *args, skip, limit)
            total = await conn.fetchval(count_query, *args)
        return [self._row_to_recipe(row) for row in rows], total

    async def find_match_candidates(self, terms: list[str]) -> list[MatchCandidate]:
        """Public recipes with an input ingredient containing any term.

        Returned in insertion order; ranking is left to the matcher.
        """
        query = """
            SELECT r.id, r.seq, r.title, r.input_ingredients, r.average_rating,
                   r.views, r.created_at
            FROM recipes r
            WHERE r.is_public
              AND EXISTS (
                  SELECT 1 FROM unnest(r.input_ingredients) AS ing
                  WHERE ing ILIKE ANY($1::text[])
              )
            ORDER BY r.seq ASC
        """
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query, contains_patterns(terms))
        return [MatchCandidate(**dict(row)) for row in rows]

    # -------------------------------------------------------------------------
    # Ratings
    # -------------------------------------------------------------------------

    async def upsert_rating(
        self,
        recipe_id: UUID,
        user_id: UUID,
        *,
        rating: int,
        comment: str | None,
    ) -> RatingUpsertResult:
        """Set the user's rating and recompute the recipe aggregates.

        Both writes run in one transaction; the recipe row is locked first so
        concurrent ratings of the same recipe serialize.
        """
        upsert = """
            INSERT INTO recipe_ratings (recipe_id, user_id, rating, comment)
            VALUES ($1, $2, $3, $4)
            ON CONFLICT (recipe_id, user_id) DO UPDATE
                SET rating = EXCLUDED.rating,
                    comment = EXCLUDED.comment,
                    created_at = now()
            RETURNING recipe_id, user_id, rating, comment, created_at,
                      (xmax = 0) AS created
        """
        recompute = """
            UPDATE recipes r SET
                average_rating = agg.average,
                total_ratings = agg.total,
                updated_at = now()
            FROM (
                SELECT coalesce(avg(rating), 0)::double precision AS average,
                       count(*)::integer AS total
                FROM recipe_ratings WHERE recipe_id = $1
            ) AS agg
            WHERE r.id = $1
            RETURNING r.average_rating, r.total_ratings
        """
        async with self.pool.acquire() as conn, conn.transaction():
            await conn.execute("SELECT 1 FROM recipes WHERE id = $1 FOR UPDATE", recipe_id)
            row = await conn.fetchrow(upsert, recipe_id, user_id, rating, comment)
            aggregates = await conn.fetchrow(recompute, recipe_id)

        record = dict(row)
        created = record.pop("created")
        return RatingUpsertResult(
            rating=RatingRecord(**record),
            created=created,
            average_rating=aggregates["average_rating"],
            total_ratings=aggregates["total_ratings"],
        )

    async def get_rating(self, recipe_id: UUID, user_id: UUID) -> RatingRecord | None:
        query = """
            SELECT recipe_id, user_id, rating, comment, created_at
            FROM recipe_ratings WHERE recipe_id = $1 AND user_id = $2
        """
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, recipe_id, user_id)
        return RatingRecord(**dict(row)) if row else None

    def _row_to_recipe(self, row: Record) -> RecipeRecord:
        return RecipeRecord(**dict(row))
