"""Recipe schemas.

``RecipeContent`` is the shape of a recipe as the AI returns it and as it is
stored; ``Recipe`` adds the stored metadata returned by the API.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import ConfigDict, Field, StringConstraints, field_validator, model_validator

from pantry_chef.schemas.base import APIRequest, APIResponse
from pantry_chef.schemas.enums import (
    DietaryRestriction,
    Difficulty,
    GeneratedBy,
    GenerationOutcome,
    MealType,
    RecipeSortField,
    SortOrder,
)


IngredientName = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)
]


# =============================================================================
# Recipe parts
# =============================================================================


class Ingredient(APIResponse):
    """A structured ingredient line."""

    model_config = ConfigDict(coerce_numbers_to_str=True, str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    amount: str = ""
    unit: str = ""


class Instruction(APIResponse):
    """One numbered preparation step."""

    model_config = ConfigDict(coerce_numbers_to_str=True, str_strip_whitespace=True)

    step_number: int = Field(..., ge=1)
    description: str = Field(..., min_length=1)
    duration: str | None = None


class CookingTime(APIResponse):
    """Preparation and cooking minutes; ``total`` is always ``prep + cook``."""

    prep: int = Field(default=0, ge=0)
    cook: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _compute_total(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            data["total"] = int(data.get("prep") or 0) + int(data.get("cook") or 0)
        return data


class DietaryInfo(APIResponse):
    is_vegetarian: bool = False
    is_vegan: bool = False
    is_gluten_free: bool = False
    is_dairy_free: bool = False
    is_nut_free: bool = False
    is_low_carb: bool = False


class NutritionalInfo(APIResponse):
    """Per-serving nutrition; macronutrients in grams."""

    calories: float | None = None
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None
    fiber: float | None = None


class RecipeContent(APIResponse):
    """The recipe body produced by generation and persisted as-is."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=1000)
    ingredients: list[Ingredient]
    instructions: list[Instruction]
    cooking_time: CookingTime = Field(default_factory=CookingTime)
    difficulty: Difficulty = Difficulty.MEDIUM
    cuisine: str = ""
    meal_type: list[MealType] = Field(default_factory=lambda: [MealType.DINNER])
    dietary_info: DietaryInfo = Field(default_factory=DietaryInfo)
    nutritional_info: NutritionalInfo | None = None
    tags: list[str] = Field(default_factory=list)

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, tags: list[str]) -> list[str]:
        return [tag.strip().lower() for tag in tags if tag.strip()]


class RecipeDraft(RecipeContent):
    """A recipe ready to persist: content plus request provenance."""

    input_ingredients: list[str]
    servings: int = Field(..., ge=1, le=20)
    generated_by: GeneratedBy = GeneratedBy.AZURE_OPENAI
    generation_prompt: str | None = Field(default=None, exclude=True)


# =============================================================================
# Responses
# =============================================================================


class Recipe(RecipeDraft):
    """A recipe as returned by the API.

    ``id`` and timestamps are absent for a generated recipe that could not be
    persisted.
    """

    id: str | None = None
    created_by: str | None = None
    is_public: bool = True
    average_rating: float = 0.0
    total_ratings: int = 0
    views: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RecipeMatch(Recipe):
    """A search hit annotated with how many query ingredients it contains."""

    match_count: int


class RecipeRating(APIResponse):
    user: str = Field(..., description="Id of the rating user")
    rating: int = Field(..., ge=1, le=5)
    comment: str | None = None
    created_at: datetime


class RecipeUserData(APIResponse):
    """Viewer-specific data attached when the request is authenticated."""

    is_saved: bool
    user_rating: RecipeRating | None = None


class GenerationInfo(APIResponse):
    status: GenerationOutcome
    reason: str | None = None
    saved: bool


class GeneratedRecipeData(APIResponse):
    recipe: Recipe
    generation: GenerationInfo


class RecipeData(APIResponse):
    recipe: Recipe


class RecipeDetailData(APIResponse):
    recipe: Recipe
    user_data: RecipeUserData | None = None


class RecipeListData(APIResponse):
    recipes: list[Recipe]


class SearchCriteria(APIResponse):
    ingredients: list[str]
    min_match: int


class SearchResultData(APIResponse):
    recipes: list[RecipeMatch]
    search_criteria: SearchCriteria


class RatingResultData(APIResponse):
    average_rating: float
    total_ratings: int
    user_rating: RecipeRating


# =============================================================================
# Requests
# =============================================================================


class GenerateRecipeRequest(APIRequest):
    """Body of ``POST /api/recipes/generate``."""

    ingredients: list[IngredientName] = Field(..., min_length=1)
    servings: int | None = Field(default=None, ge=1, le=20)
    dietary_restrictions: list[DietaryRestriction] = Field(default_factory=list)
    cuisine: str = Field(default="", max_length=50)
    meal_type: MealType = MealType.DINNER
    difficulty: Difficulty = Difficulty.MEDIUM
    max_cooking_time: int | None = Field(default=None, ge=1, le=480)
    save_to_database: bool = True


class SearchByIngredientsRequest(APIRequest):
    """Body of ``POST /api/recipes/search-by-ingredients``."""

    ingredients: list[IngredientName] = Field(..., min_length=1)
    limit: int = Field(default=10, ge=1, le=50)
    skip: int = Field(default=0, ge=0)
    min_match: int = Field(default=1, ge=1)
    sort_by: RecipeSortField = RecipeSortField.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC


class RateRecipeRequest(APIRequest):
    rating: int = Field(..., ge=1, le=5)
    comment: str | None = Field(default=None, max_length=500)
