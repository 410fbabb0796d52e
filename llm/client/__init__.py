"""LLM client module."""

from llm.client.model_client import (
    ImagePart,
    LLMError,
    Part,
    PermanentLLMError,
    ProviderFn,
    RateLimitedLLMError,
    RateLimitTimeoutError,
    ResilientModelClient,
    TransientLLMError,
)

__all__ = [
    "ImagePart",
    "LLMError",
    "Part",
    "PermanentLLMError",
    "ProviderFn",
    "RateLimitedLLMError",
    "RateLimitTimeoutError",
    "ResilientModelClient",
    "TransientLLMError",
]
