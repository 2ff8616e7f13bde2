"""LLM client implementations."""

from pantry_chef.llm.client.azure_openai import AzureOpenAIClient
from pantry_chef.llm.client.protocol import LLMClientProtocol


__all__ = ["AzureOpenAIClient", "LLMClientProtocol"]
