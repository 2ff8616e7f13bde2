"""Prompt definitions."""

from pantry_chef.llm.prompts.base import BasePrompt
from pantry_chef.llm.prompts.recipe_generation import RecipeGenerationPrompt


__all__ = ["BasePrompt", "RecipeGenerationPrompt"]
