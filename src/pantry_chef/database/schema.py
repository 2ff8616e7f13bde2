"""Database schema.

Nested recipe parts are JSONB documents inside the recipe row. Saved recipes
and ratings live in their own tables keyed by ``(user, recipe)``, which makes
each relation a single source of truth. Statements are idempotent and applied
at startup.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pantry_chef.observability.logging import get_logger


if TYPE_CHECKING:
    from asyncpg import Connection

logger = get_logger(__name__)


SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id uuid PRIMARY KEY,
        name text NOT NULL CHECK (char_length(name) BETWEEN 2 AND 50),
        email text NOT NULL CHECK (email = lower(email)),
        password_hash text NOT NULL,
        avatar text,
        preferences jsonb NOT NULL DEFAULT '{}'::jsonb,
        is_active boolean NOT NULL DEFAULT true,
        created_at timestamptz NOT NULL DEFAULT now(),
        updated_at timestamptz NOT NULL DEFAULT now(),
        last_login_at timestamptz
    )
    """,
    "CREATE UNIQUE INDEX IF NOT EXISTS users_email_key ON users (email)",
    """
    CREATE TABLE IF NOT EXISTS recipes (
        id uuid PRIMARY KEY,
        seq bigserial NOT NULL,
        title text NOT NULL CHECK (char_length(title) BETWEEN 1 AND 200),
        description text NOT NULL DEFAULT '' CHECK (char_length(description) <= 1000),
        ingredients jsonb NOT NULL DEFAULT '[]'::jsonb,
        input_ingredients text[] NOT NULL DEFAULT '{}',
        instructions jsonb NOT NULL DEFAULT '[]'::jsonb,
        prep_time integer NOT NULL DEFAULT 0 CHECK (prep_time >= 0),
        cook_time integer NOT NULL DEFAULT 0 CHECK (cook_time >= 0),
        total_time integer GENERATED ALWAYS AS (prep_time + cook_time) STORED,
        difficulty text NOT NULL DEFAULT 'medium'
            CHECK (difficulty IN ('easy', 'medium', 'hard')),
        servings integer NOT NULL CHECK (servings BETWEEN 1 AND 20),
        cuisine text NOT NULL DEFAULT '',
        meal_type text[] NOT NULL DEFAULT '{dinner}',
        dietary_info jsonb NOT NULL DEFAULT '{}'::jsonb,
        nutritional_info jsonb,
        tags text[] NOT NULL DEFAULT '{}',
        generated_by text NOT NULL DEFAULT 'azure-openai'
            CHECK (generated_by IN ('azure-openai', 'user', 'admin')),
        generation_prompt text,
        created_by uuid NOT NULL REFERENCES users (id),
        is_public boolean NOT NULL DEFAULT true,
        average_rating double precision NOT NULL DEFAULT 0
            CHECK (average_rating BETWEEN 0 AND 5),
        total_ratings integer NOT NULL DEFAULT 0,
        views integer NOT NULL DEFAULT 0,
        created_at timestamptz NOT NULL DEFAULT now(),
        updated_at timestamptz NOT NULL DEFAULT now()
    )
    """,
    "CREATE INDEX IF NOT EXISTS recipes_created_by_idx ON recipes (created_by)",
    "CREATE INDEX IF NOT EXISTS recipes_created_at_idx ON recipes (created_at DESC)",
    "CREATE INDEX IF NOT EXISTS recipes_average_rating_idx ON recipes (average_rating DESC)",
    "CREATE INDEX IF NOT EXISTS recipes_tags_idx ON recipes USING gin (tags)",
    """
    CREATE TABLE IF NOT EXISTS recipe_ratings (
        recipe_id uuid NOT NULL REFERENCES recipes (id),
        user_id uuid NOT NULL REFERENCES users (id),
        rating smallint NOT NULL CHECK (rating BETWEEN 1 AND 5),
        comment text CHECK (char_length(comment) <= 500),
        created_at timestamptz NOT NULL DEFAULT now(),
        PRIMARY KEY (recipe_id, user_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS saved_recipes (
        user_id uuid NOT NULL REFERENCES users (id),
        recipe_id uuid NOT NULL REFERENCES recipes (id),
        created_at timestamptz NOT NULL DEFAULT now(),
        PRIMARY KEY (user_id, recipe_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS saved_recipes_recipe_idx ON saved_recipes (recipe_id)",
)


async def apply_schema(conn: Connection) -> None:
    """Create tables and indexes that do not exist yet."""
    async with conn.transaction():
        for statement in SCHEMA_STATEMENTS:
            await conn.execute(statement)
    logger.info("Database schema applied", statements=len(SCHEMA_STATEMENTS))
