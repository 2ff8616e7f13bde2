"""Recipe generation service.

Provides methods for:
- Building the recipe prompt from a generation request
- One chat completion against the configured LLM client
- Parsing the reply, falling back to a placeholder recipe
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pantry_chef.llm.exceptions import LLMError
from pantry_chef.llm.prompts.recipe_generation import RecipeGenerationPrompt
from pantry_chef.observability.logging import get_logger
from pantry_chef.schemas.enums import GeneratedBy
from pantry_chef.services.generation.exceptions import RecipeGenerationError
from pantry_chef.services.generation.parser import (
    FallbackRecipe,
    GenerationResult,
    build_generation_result,
)


if TYPE_CHECKING:
    from pantry_chef.core.config import Settings
    from pantry_chef.llm.client.protocol import LLMClientProtocol
    from pantry_chef.schemas.recipe import GenerateRecipeRequest

logger = get_logger(__name__)


class RecipeGenerationService:
    """Service for generating recipes with an LLM.

    The service never persists anything; callers decide whether to store the
    returned draft.
    """

    def __init__(self, llm_client: LLMClientProtocol, settings: Settings) -> None:
        """Initialize the service.

        Args:
            llm_client: Chat-completion client.
            settings: Application settings (default servings, sampling options).
        """
        self._llm_client = llm_client
        self._settings = settings
        self._prompt = RecipeGenerationPrompt()

    def _options(self) -> dict[str, Any]:
        azure = self._settings.llm.azure
        options = self._prompt.get_options()
        options.update(
            max_tokens=azure.max_tokens,
            temperature=azure.temperature,
            top_p=azure.top_p,
        )
        return options

    async def generate(self, request: GenerateRecipeRequest) -> GenerationResult:
        """Generate a recipe draft for ``request``.

        Returns:
            ParsedRecipe, or FallbackRecipe when the reply could not be parsed.

        Raises:
            RecipeGenerationError: If no reply could be obtained.
        """
        servings = request.servings or self._settings.recipes.default_servings
        prompt = self._prompt.format(
            ingredients=request.ingredients,
            servings=servings,
            meal_type=request.meal_type,
            difficulty=request.difficulty,
            dietary_restrictions=request.dietary_restrictions,
            cuisine=request.cuisine,
            max_cooking_time=request.max_cooking_time,
        )

        logger.info(
            "Generating recipe with Azure OpenAI",
            ingredient_count=len(request.ingredients),
            servings=servings,
        )
        try:
            completion = await self._llm_client.generate(
                prompt,
                system=self._prompt.system_prompt,
                options=self._options(),
            )
        except LLMError as e:
            logger.error("Error generating recipe", error=str(e))
            msg = f"Failed to generate recipe: {e}"
            raise RecipeGenerationError(msg, cause=e) from e

        result = build_generation_result(
            completion.raw_response,
            {
                "inputIngredients": list(request.ingredients),
                "servings": servings,
                "generatedBy": GeneratedBy.AZURE_OPENAI,
                "generationPrompt": prompt,
            },
        )

        if isinstance(result, FallbackRecipe):
            logger.warning("Returning fallback recipe", reason=result.reason)
        else:
            logger.info(
                "Recipe generated successfully",
                title=result.recipe.title,
                model=completion.model,
                completion_tokens=completion.completion_tokens,
            )
        return result
