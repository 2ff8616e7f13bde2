"""Prompt for generating a recipe from a list of ingredients."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, ClassVar

from pantry_chef.llm.prompts.base import BasePrompt


RECIPE_JSON_TEMPLATE = """{
  "title": "Recipe Name",
  "description": "Brief description of the dish",
  "ingredients": [
    {
      "name": "ingredient name",
      "amount": "quantity",
      "unit": "unit of measurement"
    }
  ],
  "instructions": [
    {
      "stepNumber": 1,
      "description": "Step description",
      "duration": "time estimate"
    }
  ],
  "cookingTime": {
    "prep": 15,
    "cook": 30,
    "total": 45
  },
  "difficulty": "easy|medium|hard",
  "cuisine": "cuisine type",
  "mealType": ["breakfast|lunch|dinner|snack|dessert|appetizer"],
  "dietaryInfo": {
    "isVegetarian": false,
    "isVegan": false,
    "isGlutenFree": false,
    "isDairyFree": false,
    "isNutFree": false,
    "isLowCarb": false
  },
  "nutritionalInfo": {
    "calories": 400,
    "protein": 25,
    "carbs": 45,
    "fat": 15,
    "fiber": 8
  },
  "tags": ["tag1", "tag2"]
}"""


class RecipeGenerationPrompt(BasePrompt):
    """Asks the model for one complete recipe as a JSON object."""

    system_prompt: ClassVar[str] = (
        "You are a professional chef and recipe creator. Generate detailed, "
        "practical recipes based on the given ingredients and requirements. "
        "Always respond with valid JSON format."
    )

    temperature: ClassVar[float] = 0.7
    max_tokens: ClassVar[int | None] = 2000
    top_p: ClassVar[float | None] = 0.95

    def format(
        self,
        *,
        ingredients: Sequence[str],
        servings: int,
        meal_type: str,
        difficulty: str,
        dietary_restrictions: Sequence[str] = (),
        cuisine: str = "",
        max_cooking_time: int | None = None,
        **_: Any,
    ) -> str:
        lines = [
            f"Create a detailed recipe using these ingredients: {', '.join(ingredients)}.",
            "",
            "Requirements:",
            f"- Servings: {servings}",
            f"- Meal type: {meal_type}",
            f"- Difficulty: {difficulty}",
        ]
        if dietary_restrictions:
            lines.append(f"- Dietary restrictions: {', '.join(dietary_restrictions)}")
        if cuisine:
            lines.append(f"- Cuisine style: {cuisine}")
        if max_cooking_time:
            lines.append(f"- Maximum cooking time: {max_cooking_time} minutes")

        lines += [
            "",
            "Please respond with a JSON object in this exact format:",
            RECIPE_JSON_TEMPLATE,
            "",
            "Make sure the recipe is practical, delicious, and uses the provided "
            "ingredients as the main components. Add additional common ingredients "
            "as needed to create a complete recipe.",
        ]
        return "\n".join(lines)

    def get_options(self) -> dict[str, Any]:
        options = super().get_options()
        options.update(frequency_penalty=0, presence_penalty=0)
        return options
