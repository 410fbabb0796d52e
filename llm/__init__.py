"""LLM module - governed model client, backoff policy and settings."""

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
from llm.governor import GovernorUsage, ThroughputGovernor
from llm.settings import ModelSettings, get_model_settings

__all__ = [
    "GovernorUsage",
    "ImagePart",
    "LLMError",
    "ModelSettings",
    "Part",
    "PermanentLLMError",
    "ProviderFn",
    "RateLimitedLLMError",
    "RateLimitTimeoutError",
    "ResilientModelClient",
    "ThroughputGovernor",
    "TransientLLMError",
    "get_model_settings",
]
