"""LLM Client Protocol definition.

Defines the interface the recipe generation service depends on, so tests and
alternative backends can stand in for the Azure OpenAI client.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable


if TYPE_CHECKING:
    from pantry_chef.llm.models import LLMCompletionResult


@runtime_checkable
class LLMClientProtocol(Protocol):
    """Protocol for chat-completion clients.

    Key methods:
    - generate: one chat completion for a user prompt and optional system prompt
    - check_connectivity: cheap probe used by the deep health check
    - initialize/shutdown: lifecycle management for connection pools
    """

    @property
    def is_configured(self) -> bool:
        """Whether credentials and endpoint are present."""
        ...

    async def initialize(self) -> None:
        """Initialize client resources (HTTP connections, etc.)."""
        ...

    async def shutdown(self) -> None:
        """Release client resources."""
        ...

    async def generate(
        self,
        prompt: str,
        *,
        system: str | None = None,
        options: dict[str, Any] | None = None,
    ) -> LLMCompletionResult:
        """Generate a chat completion.

        Args:
            prompt: User message text.
            system: Optional system message.
            options: Sampling options (max_tokens, temperature, top_p, ...).

        Returns:
            LLMCompletionResult with the raw reply text.

        Raises:
            LLMConfigurationError: Client has no endpoint or API key.
            LLMUnavailableError: Service unreachable after retries.
            LLMTimeoutError: Request timed out after retries.
            LLMResponseError: HTTP error or malformed reply envelope.
            LLMRateLimitError: Provider rejected the request with 429.
        """
        ...

    async def check_connectivity(self) -> bool:
        """Whether a minimal completion succeeds."""
        ...
