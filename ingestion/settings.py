"""Configuration models for the sighting ingestion service."""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Any, List

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_KEYWORDS = ["강아지", "유기견", "목격"]


class Settings(BaseSettings):
    """Ingestion용 환경 설정."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    scan_keywords: List[str] = Field(
        default_factory=lambda: list(DEFAULT_KEYWORDS),
        alias="SCAN_KEYWORDS",
        description="JSON 배열 형태의 검색 키워드.",
    )
    scan_location: str = Field("우면동", alias="SCAN_LOCATION", description="스크래퍼에 전달할 동네 이름.")
    scan_sido: str = Field("서울특별시", alias="SCAN_SIDO", description="시/도.")
    scan_sigungu: str = Field("서초구", alias="SCAN_SIGUNGU", description="시/군/구.")
    match_notify_threshold: float = Field(
        0.6,
        ge=0.0,
        le=1.0,
        alias="MATCH_NOTIFY_THRESHOLD",
        description="이 점수를 초과하면 일치 알림 대상.",
    )
    log_level: str = Field("INFO", alias="LOG_LEVEL", description="로그 레벨.")
    log_json: bool = Field(False, alias="LOG_JSON", description="로그를 JSON 형식으로 출력할지 여부.")

    @field_validator("scan_keywords", mode="before")
    @classmethod
    def _parse_keywords(cls, value: Any) -> List[Any]:
        if value in (None, "", []):
            return list(DEFAULT_KEYWORDS)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
            except json.JSONDecodeError as exc:
                raise ValueError("SCAN_KEYWORDS는 JSON 배열이어야 합니다.") from exc
            return parsed
        if isinstance(value, list):
            return value
        raise ValueError("SCAN_KEYWORDS는 리스트 형태여야 합니다.")

    @field_validator("scan_keywords")
    @classmethod
    def _dedupe_keywords(cls, value: List[str]) -> List[str]:
        cleaned: List[str] = []
        for kw in value:
            s = kw.strip()
            if s and s not in cleaned:
                cleaned.append(s)
        if not cleaned:
            raise ValueError("SCAN_KEYWORDS에 유효한 키워드가 없습니다.")
        return cleaned

    @field_validator("scan_location")
    @classmethod
    def _validate_location(cls, value: str) -> str:
        location = value.strip()
        if not location:
            raise ValueError("SCAN_LOCATION은 공백일 수 없습니다.")
        return location


@lru_cache()
def get_settings() -> Settings:
    """환경 변수를 기준으로 Settings 인스턴스를 반환한다."""
    try:
        return Settings()
    except ValidationError as exc:
        raise RuntimeError(f"환경 변수 검증에 실패했습니다: {exc}") from exc


def reset_settings_cache() -> None:
    """Settings LRU 캐시를 초기화한다 (테스트 용도)."""
    get_settings.cache_clear()  # type: ignore[attr-defined]
