"""Recipe endpoints.

Provides:
- POST /recipes/generate for AI recipe generation
- POST /recipes/search-by-ingredients for ingredient matching
- GET /recipes and GET /recipes/{id} for browsing public recipes
- GET /recipes/saved, POST/DELETE /recipes/{id}/save for the saved collection
- POST /recipes/{id}/rate for ratings
"""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

import asyncpg
from fastapi import APIRouter, Depends, Query, status

from pantry_chef.api.dependencies import (
    get_app_settings,
    get_generation_service,
    get_recipe_matcher,
    get_recipe_repository,
    get_saved_recipe_repository,
)
from pantry_chef.auth.dependencies import CurrentUserId, OptionalUserId
from pantry_chef.core.config import Settings
from pantry_chef.core.exceptions import (
    BadRequestError,
    DatabaseError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from pantry_chef.database.ids import parse_id
from pantry_chef.database.repositories import RecipeRepository, SavedRecipeRepository
from pantry_chef.database.repositories.recipe import RecipeFilters, RecipeRecord
from pantry_chef.mappers import (
    build_draft_response,
    build_match_response,
    build_rating_response,
    build_recipe_response,
)
from pantry_chef.observability.logging import get_logger
from pantry_chef.schemas.enums import Difficulty, GenerationOutcome, MealType, RecipeSortField, SortOrder
from pantry_chef.schemas.envelope import (
    MessageResponse,
    PaginatedResponse,
    Pagination,
    SuccessResponse,
)
from pantry_chef.schemas.recipe import (
    GeneratedRecipeData,
    GenerateRecipeRequest,
    GenerationInfo,
    RateRecipeRequest,
    RatingResultData,
    RecipeDetailData,
    RecipeListData,
    RecipeUserData,
    SearchByIngredientsRequest,
    SearchCriteria,
    SearchResultData,
)
from pantry_chef.services.generation import (
    FallbackRecipe,
    RecipeGenerationService,
)
from pantry_chef.services.matching import RecipeMatcher


logger = get_logger(__name__)

router = APIRouter(prefix="/recipes", tags=["Recipes"])

RECIPE_NOT_FOUND = "Recipe not found"
MAX_PAGE_SIZE = 50


def _check_ingredient_count(ingredients: list[str], settings: Settings) -> None:
    maximum = settings.recipes.max_ingredients
    if not 1 <= len(ingredients) <= maximum:
        raise ValidationError([f"Ingredients must be an array with 1-{maximum} items"])


def _viewer_id(user_id: str | None) -> UUID | None:
    if user_id is None:
        return None
    try:
        return UUID(user_id)
    except ValueError:
        return None


async def _load_recipe(recipes: RecipeRepository, recipe_id: str) -> RecipeRecord:
    recipe = await recipes.get_by_id(parse_id(recipe_id))
    if recipe is None:
        raise NotFoundError(RECIPE_NOT_FOUND)
    return recipe


@router.post(
    "/generate",
    response_model=SuccessResponse[GeneratedRecipeData],
    status_code=status.HTTP_201_CREATED,
    summary="Generate a recipe from ingredients",
    description=(
        "Generates a recipe with Azure OpenAI. The recipe is stored unless "
        "saveToDatabase is false; when storing fails the generated recipe is "
        "still returned."
    ),
    responses={
        400: {"description": "Validation failed"},
        401: {"description": "Authentication required"},
        503: {"description": "AI service unavailable"},
    },
)
async def generate_recipe(
    body: GenerateRecipeRequest,
    user_id: CurrentUserId,
    generator: Annotated[RecipeGenerationService, Depends(get_generation_service)],
    recipes: Annotated[RecipeRepository, Depends(get_recipe_repository)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> SuccessResponse[GeneratedRecipeData]:
    """Generate a recipe and optionally persist it as a public recipe."""
    _check_ingredient_count(body.ingredients, settings)
    owner_id = parse_id(user_id)

    result = await generator.generate(body)
    recipe = build_draft_response(result.recipe)
    saved = False

    if body.save_to_database:
        try:
            record = await recipes.create(result.recipe, created_by=owner_id, is_public=True)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, DatabaseError, OSError) as e:
            logger.warning(
                "Database save failed - returning generated recipe only",
                error=str(e),
            )
        else:
            recipe = build_recipe_response(record)
            saved = True

    fallback = isinstance(result, FallbackRecipe)
    generation = GenerationInfo(
        status=GenerationOutcome.FALLBACK if fallback else GenerationOutcome.PARSED,
        reason=result.reason if fallback else None,
        saved=saved,
    )
    return SuccessResponse[GeneratedRecipeData](
        message="Recipe generated successfully",
        data=GeneratedRecipeData(recipe=recipe, generation=generation),
    )


@router.post(
    "/search-by-ingredients",
    response_model=SuccessResponse[SearchResultData],
    summary="Find public recipes by ingredients",
    description=(
        "Ranks public recipes by how many of their input ingredients contain "
        "any of the given ingredients."
    ),
)
async def search_by_ingredients(
    body: SearchByIngredientsRequest,
    matcher: Annotated[RecipeMatcher, Depends(get_recipe_matcher)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> SuccessResponse[SearchResultData]:
    _check_ingredient_count(body.ingredients, settings)

    matches = await matcher.search(
        body.ingredients,
        min_match=body.min_match,
        skip=body.skip,
        limit=body.limit,
        sort_by=body.sort_by,
        sort_order=body.sort_order,
    )
    return SuccessResponse[SearchResultData](
        message="Recipes retrieved successfully",
        data=SearchResultData(
            recipes=[build_match_response(match) for match in matches],
            search_criteria=SearchCriteria(
                ingredients=body.ingredients, min_match=body.min_match
            ),
        ),
    )


@router.get(
    "/saved",
    response_model=PaginatedResponse[RecipeListData],
    summary="List the authenticated user's saved recipes",
)
async def get_saved_recipes(
    user_id: CurrentUserId,
    saved: Annotated[SavedRecipeRepository, Depends(get_saved_recipe_repository)],
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = 10,
    sort_by: Annotated[RecipeSortField, Query(alias="sortBy")] = RecipeSortField.CREATED_AT,
    sort_order: Annotated[SortOrder, Query(alias="sortOrder")] = SortOrder.DESC,
) -> PaginatedResponse[RecipeListData]:
    records, total = await saved.list_recipes(
        parse_id(user_id),
        sort_by=sort_by,
        sort_order=sort_order,
        skip=(page - 1) * limit,
        limit=limit,
    )
    return PaginatedResponse[RecipeListData](
        message="Saved recipes retrieved successfully",
        data=RecipeListData(recipes=[build_recipe_response(record) for record in records]),
        pagination=Pagination.build(page=page, limit=limit, total=total),
    )


@router.get(
    "",
    response_model=PaginatedResponse[RecipeListData],
    summary="List public recipes",
)
async def list_recipes(
    recipes: Annotated[RecipeRepository, Depends(get_recipe_repository)],
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = 10,
    ingredients: Annotated[str | None, Query(description="Comma-separated")] = None,
    cuisine: Annotated[str | None, Query(max_length=50)] = None,
    meal_type: Annotated[MealType | None, Query(alias="mealType")] = None,
    difficulty: Difficulty | None = None,
    max_cooking_time: Annotated[int | None, Query(alias="maxCookingTime", ge=1)] = None,
    is_vegetarian: Annotated[bool, Query(alias="isVegetarian")] = False,
    is_vegan: Annotated[bool, Query(alias="isVegan")] = False,
    is_gluten_free: Annotated[bool, Query(alias="isGlutenFree")] = False,
    search: Annotated[str | None, Query(max_length=200)] = None,
    sort_by: Annotated[RecipeSortField, Query(alias="sortBy")] = RecipeSortField.CREATED_AT,
    sort_order: Annotated[SortOrder, Query(alias="sortOrder")] = SortOrder.DESC,
) -> PaginatedResponse[RecipeListData]:
    """Filtered, sorted, paginated listing of public recipes."""
    ingredient_terms = tuple(
        term.strip() for term in (ingredients or "").split(",") if term.strip()
    )
    filters = RecipeFilters(
        ingredients=ingredient_terms,
        cuisine=cuisine or None,
        meal_type=meal_type,
        difficulty=difficulty,
        max_cooking_time=max_cooking_time,
        is_vegetarian=is_vegetarian,
        is_vegan=is_vegan,
        is_gluten_free=is_gluten_free,
        search=search or None,
    )
    records, total = await recipes.list_public(
        filters,
        sort_by=sort_by,
        sort_order=sort_order,
        skip=(page - 1) * limit,
        limit=limit,
    )
    return PaginatedResponse[RecipeListData](
        message="Recipes retrieved successfully",
        data=RecipeListData(recipes=[build_recipe_response(record) for record in records]),
        pagination=Pagination.build(page=page, limit=limit, total=total),
    )


@router.get(
    "/{recipe_id}",
    response_model=SuccessResponse[RecipeDetailData],
    summary="Get a recipe",
    description=(
        "Private recipes are only visible to their owner. Views by anyone but "
        "the owner are counted."
    ),
    responses={403: {"description": "Private recipe"}, 404: {"description": "Not found"}},
)
async def get_recipe(
    recipe_id: str,
    user_id: OptionalUserId,
    recipes: Annotated[RecipeRepository, Depends(get_recipe_repository)],
    saved: Annotated[SavedRecipeRepository, Depends(get_saved_recipe_repository)],
) -> SuccessResponse[RecipeDetailData]:
    record = await _load_recipe(recipes, recipe_id)
    viewer = _viewer_id(user_id)
    is_owner = viewer is not None and viewer == record.created_by

    if not record.is_public and not is_owner:
        raise ForbiddenError("Access denied to private recipe")

    if not is_owner:
        views = await recipes.increment_views(record.id)
        record = record.model_copy(update={"views": views})

    user_data = None
    if viewer is not None:
        rating = await recipes.get_rating(record.id, viewer)
        user_data = RecipeUserData(
            is_saved=await saved.is_saved(viewer, record.id),
            user_rating=build_rating_response(rating) if rating else None,
        )

    return SuccessResponse[RecipeDetailData](
        message="Recipe retrieved successfully",
        data=RecipeDetailData(recipe=build_recipe_response(record), user_data=user_data),
    )


@router.post(
    "/{recipe_id}/save",
    response_model=MessageResponse,
    summary="Save a recipe to the user's collection",
    responses={400: {"description": "Recipe already saved"}},
)
async def save_recipe(
    recipe_id: str,
    user_id: CurrentUserId,
    recipes: Annotated[RecipeRepository, Depends(get_recipe_repository)],
    saved: Annotated[SavedRecipeRepository, Depends(get_saved_recipe_repository)],
) -> MessageResponse:
    record = await _load_recipe(recipes, recipe_id)
    if not await saved.save(parse_id(user_id), record.id):
        raise BadRequestError("Recipe already saved")
    return MessageResponse(message="Recipe saved successfully")


@router.delete(
    "/{recipe_id}/save",
    response_model=MessageResponse,
    summary="Remove a recipe from the user's collection",
)
async def unsave_recipe(
    recipe_id: str,
    user_id: CurrentUserId,
    recipes: Annotated[RecipeRepository, Depends(get_recipe_repository)],
    saved: Annotated[SavedRecipeRepository, Depends(get_saved_recipe_repository)],
) -> MessageResponse:
    """Removing a recipe that is not saved succeeds without changes."""
    record = await _load_recipe(recipes, recipe_id)
    await saved.unsave(parse_id(user_id), record.id)
    return MessageResponse(message="Recipe removed from saved recipes")


@router.post(
    "/{recipe_id}/rate",
    response_model=SuccessResponse[RatingResultData],
    summary="Rate a recipe",
    description="Each user has at most one rating per recipe; rating again replaces it.",
)
async def rate_recipe(
    recipe_id: str,
    body: RateRecipeRequest,
    user_id: CurrentUserId,
    recipes: Annotated[RecipeRepository, Depends(get_recipe_repository)],
) -> SuccessResponse[RatingResultData]:
    record = await _load_recipe(recipes, recipe_id)
    result = await recipes.upsert_rating(
        record.id,
        parse_id(user_id),
        rating=body.rating,
        comment=body.comment,
    )
    return SuccessResponse[RatingResultData](
        message="Rating added successfully" if result.created else "Rating updated successfully",
        data=RatingResultData(
            average_rating=result.average_rating,
            total_ratings=result.total_ratings,
            user_rating=build_rating_response(result.rating),
        ),
    )
