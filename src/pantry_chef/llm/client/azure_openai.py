"""HTTP client for Azure OpenAI chat completions.

Azure hosts OpenAI models behind per-resource endpoints; a deployment name
selects the model and an ``api-key`` header authenticates the caller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
from aiolimiter import AsyncLimiter
from pydantic import ValidationError

from pantry_chef.llm.exceptions import (
    LLMConfigurationError,
    LLMRateLimitError,
    LLMResponseError,
    LLMTimeoutError,
    LLMUnavailableError,
)
from pantry_chef.llm.models import (
    AzureChatRequest,
    AzureChatResponse,
    ChatMessage,
    LLMCompletionResult,
)
from pantry_chef.observability.logging import get_logger


if TYPE_CHECKING:
    from pantry_chef.core.config import Settings


logger = get_logger(__name__)

CONNECTIVITY_PROMPT = 'Say "Hello from Azure OpenAI!"'


class AzureOpenAIClient:
    """Async HTTP client for an Azure OpenAI chat deployment.

    Attributes:
        endpoint: Azure resource endpoint, e.g. https://my-resource.openai.azure.com.
        deployment: Deployment name of the chat model.
        api_version: REST API version query parameter.
        timeout: HTTP request timeout in seconds.
        max_retries: Maximum retry attempts for transient failures.
    """

    def __init__(
        self,
        endpoint: str | None,
        api_key: str | None,
        deployment: str = "gpt-35-turbo",
        api_version: str = "2024-02-15-preview",
        timeout: float = 50.0,
        max_retries: int = 2,
        requests_per_minute: float = 60.0,
    ) -> None:
        """Initialize the Azure OpenAI client.

        Args:
            endpoint: Azure resource endpoint. None leaves the client unconfigured.
            api_key: Azure OpenAI API key. None leaves the client unconfigured.
            deployment: Chat model deployment name.
            api_version: REST API version.
            timeout: HTTP request timeout in seconds (default: 50).
            max_retries: Maximum retries for transient failures (default: 2).
            requests_per_minute: Client-side pacing of requests (default: 60).
        """
        self.endpoint = endpoint.rstrip("/") if endpoint else None
        self.api_key = api_key or None
        self.deployment = deployment
        self.api_version = api_version
        self.timeout = timeout
        self.max_retries = max_retries
        self._http_client: httpx.AsyncClient | None = None
        # One request per (60/rpm) seconds, so there is no initial burst
        self._rate_limiter = AsyncLimiter(1, 60.0 / requests_per_minute)

    @classmethod
    def from_settings(cls, settings: Settings) -> AzureOpenAIClient:
        azure = settings.llm.azure
        return cls(
            endpoint=azure.endpoint if settings.llm.enabled else None,
            api_key=settings.AZURE_OPENAI_API_KEY,
            deployment=azure.deployment,
            api_version=azure.api_version,
            timeout=azure.timeout,
            max_retries=azure.max_retries,
            requests_per_minute=azure.requests_per_minute,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.endpoint and self.api_key)

    @property
    def chat_url(self) -> str:
        """Get the chat completions endpoint URL of the deployment."""
        return f"{self.endpoint}/openai/deployments/{self.deployment}/chat/completions"

    async def initialize(self) -> None:
        """Initialize the HTTP client with auth headers.

        An unconfigured client logs a warning and stays idle; generation
        requests then fail with LLMConfigurationError.
        """
        if self._http_client is not None:
            return

        if not self.is_configured:
            logger.warning(
                "Azure OpenAI credentials not configured. Recipe generation will not work."
            )
            return

        self._http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            headers={
                "api-key": self.api_key or "",
                "Content-Type": "application/json",
            },
            params={"api-version": self.api_version},
            limits=httpx.Limits(
                max_keepalive_connections=5,
                max_connections=10,
            ),
        )
        logger.info(
            "AzureOpenAIClient initialized",
            deployment=self.deployment,
            api_version=self.api_version,
            timeout=self.timeout,
        )

    async def shutdown(self) -> None:
        """Close the HTTP client and release connections."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
            logger.debug("AzureOpenAIClient shutdown")

    async def _execute_with_retry(self, request: AzureChatRequest) -> AzureChatResponse:
        """Execute request with retry logic for transient failures."""
        if not self.is_configured:
            msg = "Azure OpenAI service not initialized"
            raise LLMConfigurationError(msg)

        if self._http_client is None:
            await self.initialize()

        assert self._http_client is not None

        last_exception: Exception | None = None

        for attempt in range(self.max_retries + 1):
            # Wait for rate limiter before making request
            await self._rate_limiter.acquire()

            try:
                response = await self._http_client.post(
                    self.chat_url,
                    json=request.model_dump(exclude_none=True),
                )

                if response.status_code == 429:
                    retry_after = response.headers.get("retry-after", "60")
                    msg = f"Azure OpenAI rate limit exceeded, retry after {retry_after}s"
                    raise LLMRateLimitError(msg)

                response.raise_for_status()
                return AzureChatResponse.model_validate(response.json())

            except httpx.TimeoutException as e:
                last_exception = e
                logger.warning(
                    "Azure OpenAI request timeout",
                    attempt=attempt + 1,
                    max_retries=self.max_retries,
                    timeout=self.timeout,
                )
                if attempt < self.max_retries:
                    continue
                msg = f"Azure OpenAI timeout after {self.timeout}s"
                raise LLMTimeoutError(msg) from e

            except httpx.HTTPStatusError as e:
                logger.exception(
                    "Azure OpenAI request failed",
                    status_code=e.response.status_code,
                    deployment=self.deployment,
                )
                msg = f"Azure OpenAI returned {e.response.status_code}"
                raise LLMResponseError(msg) from e

            except httpx.RequestError as e:
                last_exception = e
                logger.warning(
                    "Azure OpenAI connection error",
                    attempt=attempt + 1,
                    max_retries=self.max_retries,
                    error=str(e),
                )
                if attempt < self.max_retries:
                    continue
                msg = f"Cannot connect to Azure OpenAI: {e}"
                raise LLMUnavailableError(msg) from e

            except (ValueError, ValidationError) as e:
                msg = "Azure OpenAI returned a malformed response"
                raise LLMResponseError(msg) from e

        msg = "Azure OpenAI max retries exceeded"
        raise LLMUnavailableError(msg) from last_exception

    async def generate(
        self,
        prompt: str,
        *,
        system: str | None = None,
        options: dict[str, Any] | None = None,
    ) -> LLMCompletionResult:
        """Generate a chat completion from the deployment.

        Args:
            prompt: User message text.
            system: Optional system message.
            options: max_tokens, temperature, top_p, frequency_penalty and
                presence_penalty overrides.

        Returns:
            LLMCompletionResult with the raw reply text.

        Raises:
            LLMConfigurationError: If endpoint or API key are missing.
            LLMUnavailableError: If Azure OpenAI cannot be reached.
            LLMTimeoutError: If the request times out.
            LLMResponseError: If Azure OpenAI returns an error or no choices.
        """
        messages: list[ChatMessage] = []
        if system:
            messages.append(ChatMessage(role="system", content=system))
        messages.append(ChatMessage(role="user", content=prompt))

        request = AzureChatRequest(messages=messages, **(options or {}))
        response = await self._execute_with_retry(request)

        if not response.choices or response.choices[0].message.content is None:
            msg = "No response received from Azure OpenAI"
            raise LLMResponseError(msg)

        usage = response.usage
        return LLMCompletionResult(
            raw_response=response.choices[0].message.content,
            model=response.model or self.deployment,
            prompt_tokens=usage.prompt_tokens if usage else None,
            completion_tokens=usage.completion_tokens if usage else None,
        )

    async def check_connectivity(self) -> bool:
        """Send a tiny completion and report whether a reply came back."""
        if not self.is_configured:
            return False
        try:
            result = await self.generate(
                CONNECTIVITY_PROMPT,
                options={"max_tokens": 50, "temperature": 0.1},
            )
        except (LLMConfigurationError, LLMUnavailableError, LLMResponseError, LLMRateLimitError) as e:
            logger.warning("Azure OpenAI connectivity check failed", error=str(e))
            return False
        return bool(result.raw_response)
