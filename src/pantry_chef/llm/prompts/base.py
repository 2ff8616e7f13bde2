"""Base class for LLM prompts.

Provides a standardized interface for defining prompts with:
- A fixed system prompt
- A template formatted from typed input variables
- Sampling options sent with the completion request
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar


class BasePrompt(ABC):
    """Base class for all LLM prompts.

    Centralizes prompt definitions to:
    - Prevent scattered hardcoded strings
    - Enable prompt testing
    - Standardize sampling options per prompt
    """

    # Override in subclasses
    system_prompt: ClassVar[str | None] = None
    """Optional system prompt to set context for the LLM."""

    temperature: ClassVar[float] = 0.1
    """Temperature for generation (low = more deterministic)."""

    max_tokens: ClassVar[int | None] = None
    """Maximum tokens to generate (None = model default)."""

    top_p: ClassVar[float | None] = None
    """Nucleus sampling mass (None = model default)."""

    @abstractmethod
    def format(self, **kwargs: Any) -> str:
        """Format the prompt template with input variables.

        Args:
            **kwargs: Variables to substitute into template.

        Returns:
            Formatted prompt string ready for LLM.
        """
        ...

    @property
    def name(self) -> str:
        """Prompt identifier for logging."""
        return self.__class__.__name__

    def get_options(self) -> dict[str, Any]:
        """Get request options for this prompt.

        Returns:
            Dict of options to pass to the LLM client.
        """
        options: dict[str, Any] = {"temperature": self.temperature}
        if self.max_tokens is not None:
            options["max_tokens"] = self.max_tokens
        if self.top_p is not None:
            options["top_p"] = self.top_p
        return options
