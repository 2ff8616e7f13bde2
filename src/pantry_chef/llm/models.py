"""Azure OpenAI chat-completion wire models.

These follow the REST shape of the chat completions endpoint, which uses
snake_case keys, so they do not use the camelCase API schema bases.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """A single chat message."""

    role: Literal["system", "user", "assistant"] = Field(
        ..., description="Message role: system, user, or assistant"
    )
    content: str = Field(..., description="Message content")


class AzureChatRequest(BaseModel):
    """Request body for the chat completions endpoint.

    The deployment selects the model, so no ``model`` field is sent.
    """

    model_config = ConfigDict(extra="forbid")

    messages: list[ChatMessage] = Field(..., min_length=1, description="Chat messages")
    max_tokens: int | None = Field(default=None, description="Maximum tokens to generate")
    temperature: float = Field(default=0.7, description="Sampling temperature")
    top_p: float | None = Field(default=None, description="Nucleus sampling mass")
    frequency_penalty: float | None = Field(default=None)
    presence_penalty: float | None = Field(default=None)


class AzureUsage(BaseModel):
    """Token usage statistics."""

    prompt_tokens: int = Field(..., description="Input token count")
    completion_tokens: int = Field(default=0, description="Output token count")
    total_tokens: int = Field(..., description="Total token count")


class AzureResponseMessage(BaseModel):
    role: str = "assistant"
    content: str | None = None


class AzureChoice(BaseModel):
    """One generated completion."""

    index: int = Field(default=0, description="Choice index")
    message: AzureResponseMessage = Field(..., description="Generated message")
    finish_reason: str | None = Field(default=None, description="Reason for completion")


class AzureChatResponse(BaseModel):
    """Response envelope of the chat completions endpoint.

    Unknown properties (content filter results, fingerprints) are ignored.
    """

    id: str = Field(default="", description="Unique response ID")
    model: str = Field(default="", description="Model that generated response")
    choices: list[AzureChoice] = Field(default_factory=list, description="Completions")
    usage: AzureUsage | None = Field(default=None, description="Token usage")


class LLMCompletionResult(BaseModel):
    """Result of an LLM completion.

    Wraps the raw text with metadata about the generation.
    """

    raw_response: str = Field(..., description="Raw text response from LLM")
    model: str = Field(..., description="Model that generated response")
    prompt_tokens: int | None = Field(default=None, description="Input token count")
    completion_tokens: int | None = Field(default=None, description="Output token count")
