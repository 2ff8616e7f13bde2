"""Recipe generation service package.

Turns a generation request into a recipe draft by prompting Azure OpenAI and
parsing its reply, with a placeholder recipe when the reply is unusable.
"""

from pantry_chef.services.generation.exceptions import RecipeGenerationError
from pantry_chef.services.generation.parser import FallbackRecipe, GenerationResult, ParsedRecipe
from pantry_chef.services.generation.service import RecipeGenerationService


__all__ = [
    "FallbackRecipe",
    "GenerationResult",
    "ParsedRecipe",
    "RecipeGenerationError",
    "RecipeGenerationService",
]
