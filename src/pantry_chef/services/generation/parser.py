"""Parsing of AI replies into recipe drafts.

A reply is expected to be one JSON object, possibly wrapped in Markdown code
fences. When it cannot be turned into a valid recipe a placeholder recipe is
produced instead, carrying the raw reply as its only instruction.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

import orjson
from pydantic import ValidationError

from pantry_chef.observability.logging import get_logger
from pantry_chef.schemas.recipe import RecipeContent, RecipeDraft
from pantry_chef.services.generation.exceptions import RecipeParseError


logger = get_logger(__name__)

_CODE_FENCE_RE = re.compile(r"```(?:json)?\s*")

_REQUIRED_FIELDS = ("title", "ingredients", "instructions")

# Wire names of the recipe body; anything else in the reply is dropped
_CONTENT_KEYS = frozenset(
    field.alias or name for name, field in RecipeContent.model_fields.items()
)

FALLBACK_TITLE = "Generated Recipe"
FALLBACK_DESCRIPTION = "A delicious recipe generated from your ingredients."
FALLBACK_INSTRUCTION = "Combine ingredients and cook as desired."


@dataclass(frozen=True)
class ParsedRecipe:
    """The reply parsed into a complete recipe."""

    recipe: RecipeDraft


@dataclass(frozen=True)
class FallbackRecipe:
    """The reply was unusable; ``recipe`` is a placeholder built around it."""

    recipe: RecipeDraft
    raw_text: str
    reason: str


GenerationResult = ParsedRecipe | FallbackRecipe


def strip_code_fences(text: str) -> str:
    return _CODE_FENCE_RE.sub("", text.strip()).strip()


def parse_recipe_reply(text: str) -> dict[str, Any]:
    """Extract the recipe object from a reply and back-fill optional fields.

    Raises:
        RecipeParseError: If the reply is not a JSON object with a title and
            list-typed ingredients and instructions.
    """
    try:
        payload = orjson.loads(strip_code_fences(text))
    except orjson.JSONDecodeError as e:
        msg = f"Reply is not valid JSON: {e}"
        raise RecipeParseError(msg) from e

    if not isinstance(payload, dict):
        msg = "Reply is not a JSON object"
        raise RecipeParseError(msg)

    if not all(payload.get(field) for field in _REQUIRED_FIELDS):
        msg = "Missing required recipe fields"
        raise RecipeParseError(msg)
    if not isinstance(payload["ingredients"], list):
        msg = "Ingredients must be an array"
        raise RecipeParseError(msg)
    if not isinstance(payload["instructions"], list):
        msg = "Instructions must be an array"
        raise RecipeParseError(msg)

    recipe = {key: value for key, value in payload.items() if key in _CONTENT_KEYS}

    recipe["description"] = recipe.get("description") or ""
    recipe["difficulty"] = str(recipe.get("difficulty") or "medium").lower()
    recipe["cuisine"] = recipe.get("cuisine") or ""
    meal_type = recipe.get("mealType")
    if not isinstance(meal_type, list):
        meal_type = [meal_type or "dinner"]
    recipe["mealType"] = [str(value).lower() for value in meal_type]
    recipe["tags"] = recipe.get("tags") or []
    recipe["cookingTime"] = recipe.get("cookingTime") or {"prep": 0, "cook": 0}
    recipe["dietaryInfo"] = recipe.get("dietaryInfo") or {}
    recipe["nutritionalInfo"] = recipe.get("nutritionalInfo") or {}

    return recipe


def fallback_recipe_content(raw_text: str) -> dict[str, Any]:
    """Placeholder recipe whose single instruction is the raw reply."""
    return {
        "title": FALLBACK_TITLE,
        "description": FALLBACK_DESCRIPTION,
        "ingredients": [{"name": "Main ingredients", "amount": "As needed", "unit": ""}],
        "instructions": [
            {
                "stepNumber": 1,
                "description": raw_text.strip() or FALLBACK_INSTRUCTION,
                "duration": "As needed",
            }
        ],
        "cookingTime": {"prep": 15, "cook": 30},
        "difficulty": "medium",
        "cuisine": "",
        "mealType": ["dinner"],
        "dietaryInfo": {},
        "nutritionalInfo": {},
        "tags": ["generated"],
    }


def build_generation_result(raw_text: str, provenance: dict[str, Any]) -> GenerationResult:
    """Turn a reply into a recipe draft.

    Args:
        raw_text: The model's reply.
        provenance: ``inputIngredients``, ``servings``, ``generatedBy`` and
            ``generationPrompt`` of the request.
    """
    try:
        content = parse_recipe_reply(raw_text)
        return ParsedRecipe(recipe=RecipeDraft.model_validate({**content, **provenance}))
    except (RecipeParseError, ValidationError) as e:
        reason = str(e)
        logger.warning(
            "Error parsing recipe response",
            reason=reason,
            raw_response=raw_text[:500],
        )

    recipe = RecipeDraft.model_validate({**fallback_recipe_content(raw_text), **provenance})
    return FallbackRecipe(recipe=recipe, raw_text=raw_text, reason=reason)
