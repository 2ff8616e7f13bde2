"""LLM client exceptions.

These exceptions are raised by the Azure OpenAI client and caught by the
recipe generation service, which reports them as a single generation failure.
Every message names the provider so the failure is classified as an AI
service outage.
"""

from __future__ import annotations


class LLMError(Exception):
    """Base exception for LLM client errors."""


class LLMUnavailableError(LLMError):
    """Raised when the LLM service cannot be reached.

    This includes connection errors and timeouts that persisted through all
    retry attempts.
    """


class LLMTimeoutError(LLMUnavailableError):
    """Raised when an LLM request times out."""


class LLMResponseError(LLMError):
    """Raised when the LLM returns an error status or a malformed envelope."""


class LLMRateLimitError(LLMError):
    """Raised when the LLM service rate limits the request."""


class LLMConfigurationError(LLMError):
    """Raised when the LLM client is used without endpoint or API key."""
