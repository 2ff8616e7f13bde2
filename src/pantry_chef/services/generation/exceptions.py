"""Exceptions for the recipe generation service."""

from __future__ import annotations


class RecipeGenerationError(Exception):
    """Raised when no reply could be obtained from the AI provider.

    The message is ``Failed to generate recipe: <cause>``; the cause text
    names the provider, which is how the error is reported as an AI service
    outage.
    """

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        """Initialize the exception.

        Args:
            message: Error message.
            cause: Optional underlying exception.
        """
        self.cause = cause
        super().__init__(message)


class RecipeParseError(ValueError):
    """Raised when a reply does not contain a usable recipe object."""
