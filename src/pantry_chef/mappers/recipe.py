"""Recipe-related data mappers.

This module contains functions for transforming recipe data between
different representations (store record, unsaved draft, API response).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pantry_chef.schemas.recipe import Recipe, RecipeMatch, RecipeRating


if TYPE_CHECKING:
    from pantry_chef.database.repositories.recipe import RatingRecord, RecipeRecord
    from pantry_chef.schemas.recipe import RecipeDraft
    from pantry_chef.services.matching.matcher import RecipeMatchResult


def _recipe_fields(record: RecipeRecord) -> dict[str, object]:
    return {
        "id": str(record.id),
        "title": record.title,
        "description": record.description,
        "ingredients": record.ingredients,
        "inputIngredients": record.input_ingredients,
        "instructions": record.instructions,
        "cookingTime": {"prep": record.prep_time, "cook": record.cook_time},
        "difficulty": record.difficulty,
        "servings": record.servings,
        "cuisine": record.cuisine,
        "mealType": record.meal_type,
        "dietaryInfo": record.dietary_info,
        "nutritionalInfo": record.nutritional_info,
        "tags": record.tags,
        "generatedBy": record.generated_by,
        "createdBy": str(record.created_by),
        "isPublic": record.is_public,
        "averageRating": record.average_rating,
        "totalRatings": record.total_ratings,
        "views": record.views,
        "createdAt": record.created_at,
        "updatedAt": record.updated_at,
    }


def build_recipe_response(record: RecipeRecord) -> Recipe:
    """Build the API recipe from a stored row.

    The generation prompt is never part of the response.
    """
    return Recipe.model_validate(_recipe_fields(record))


def build_draft_response(draft: RecipeDraft) -> Recipe:
    """Build the API recipe for a generated draft that was not persisted."""
    return Recipe.model_validate(draft.model_dump())


def build_match_response(result: RecipeMatchResult) -> RecipeMatch:
    return RecipeMatch.model_validate(
        {**_recipe_fields(result.recipe), "matchCount": result.match_count}
    )


def build_rating_response(record: RatingRecord) -> RecipeRating:
    return RecipeRating(
        user=str(record.user_id),
        rating=record.rating,
        comment=record.comment,
        created_at=record.created_at,
    )
