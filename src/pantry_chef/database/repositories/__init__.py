"""Database repositories."""

from pantry_chef.database.repositories.recipe import RecipeRepository
from pantry_chef.database.repositories.saved import SavedRecipeRepository
from pantry_chef.database.repositories.user import UserRepository


__all__ = ["RecipeRepository", "SavedRecipeRepository", "UserRepository"]
