"""Settings for the model invocation (multimodal LLM) layer."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import (
    Field,
    PositiveFloat,
    PositiveInt,
    SecretStr,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict


class ModelSettings(BaseSettings):
    """Environment-driven configuration for model calls and rate limiting."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    llm_provider: Literal["gemini", "openai"] = Field("gemini", alias="LLM_PROVIDER", description="Model provider")
    google_api_key: Optional[SecretStr] = Field(
        None,
        alias="GOOGLE_GENERATIVE_AI_API_KEY",
        description="Google Generative AI API key",
    )
    openai_api_key: Optional[SecretStr] = Field(None, alias="OPENAI_API_KEY", description="OpenAI API key")
    analysis_model: str = Field("gemini-2.5-flash-lite", alias="ANALYSIS_MODEL", description="Batch analysis model")
    profile_model: str = Field("gemini-2.5-flash", alias="PROFILE_MODEL", description="Profile extraction model")
    rate_limit_requests: PositiveInt = Field(
        20,
        alias="RATE_LIMIT_REQUESTS",
        description="Max model calls per rolling window",
    )
    rate_limit_window_seconds: PositiveFloat = Field(60.0, alias="RATE_LIMIT_WINDOW_SECONDS", description="Rolling window")
    rate_limit_wait_timeout_seconds: PositiveFloat = Field(
        60.0,
        alias="RATE_LIMIT_WAIT_TIMEOUT_SECONDS",
        description="How long a caller may wait for a rate slot",
    )
    rate_limit_poll_interval_seconds: PositiveFloat = Field(
        3.0,
        alias="RATE_LIMIT_POLL_INTERVAL_SECONDS",
        description="Polling interval while waiting for a rate slot",
    )
    analysis_retry_max_attempts: PositiveInt = Field(3, alias="ANALYSIS_RETRY_MAX_ATTEMPTS", description="Max attempts")
    analysis_backoff_base_seconds: PositiveFloat = Field(
        5.0,
        alias="ANALYSIS_BACKOFF_BASE_SECONDS",
        description="Base delay for exponential backoff",
    )
    analysis_batch_size: PositiveInt = Field(5, alias="ANALYSIS_BATCH_SIZE", description="Posts per model call")
    image_fetch_timeout_seconds: PositiveFloat = Field(
        10.0,
        alias="IMAGE_FETCH_TIMEOUT_SECONDS",
        description="Image download timeout",
    )

    @field_validator("analysis_model", "profile_model")
    @classmethod
    def _non_empty_model(cls, v: str) -> str:
        s = v.strip()
        if not s:
            raise ValueError("모델 이름은 공백일 수 없습니다.")
        return s

    @field_validator("rate_limit_poll_interval_seconds")
    @classmethod
    def _reasonable_poll_interval(cls, v: float) -> float:
        if v > 10:
            raise ValueError("RATE_LIMIT_POLL_INTERVAL_SECONDS는 10초 이하여야 합니다.")
        return v

    @model_validator(mode="after")
    def _provider_key_present(self) -> "ModelSettings":
        key = self.google_api_key if self.llm_provider == "gemini" else self.openai_api_key
        if key is None or not key.get_secret_value().strip():
            raise ValueError(f"{self.llm_provider} provider의 API 키가 설정되지 않았습니다.")
        return self


@lru_cache()
def get_model_settings() -> ModelSettings:
    try:
        return ModelSettings()
    except ValidationError as exc:
        raise RuntimeError(f"모델 설정 검증 실패: {exc}") from exc


def reset_model_settings_cache() -> None:
    get_model_settings.cache_clear()  # type: ignore[attr-defined]
