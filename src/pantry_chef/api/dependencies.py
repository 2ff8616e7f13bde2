"""FastAPI dependencies for service access.

This module provides reusable dependencies for accessing repositories and
services in route handlers. Shared clients are created during application
startup and stored in app.state; tests replace these dependencies through
``app.dependency_overrides``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

from fastapi import Depends, Request

from pantry_chef.core.exceptions import AIServiceError
from pantry_chef.database.repositories import (
    RecipeRepository,
    SavedRecipeRepository,
    UserRepository,
)
from pantry_chef.services.generation import RecipeGenerationService
from pantry_chef.services.matching import RecipeMatcher


if TYPE_CHECKING:
    from pantry_chef.core.config import Settings
    from pantry_chef.llm.client.protocol import LLMClientProtocol


def get_app_settings(request: Request) -> Settings:
    """Settings the application was built with."""
    return request.app.state.settings


def get_user_repository() -> UserRepository:
    return UserRepository()


def get_recipe_repository() -> RecipeRepository:
    return RecipeRepository()


def get_saved_recipe_repository() -> SavedRecipeRepository:
    return SavedRecipeRepository()


def get_recipe_matcher(
    recipes: Annotated[RecipeRepository, Depends(get_recipe_repository)],
) -> RecipeMatcher:
    return RecipeMatcher(recipes)


def get_llm_client(request: Request) -> LLMClientProtocol:
    """Get the chat-completion client from app state.

    Raises:
        AIServiceError: 503 if the client was not created at startup.
    """
    client: LLMClientProtocol | None = getattr(request.app.state, "llm_client", None)
    if client is None:
        raise AIServiceError()
    return client


def get_generation_service(request: Request) -> RecipeGenerationService:
    return RecipeGenerationService(get_llm_client(request), request.app.state.settings)
