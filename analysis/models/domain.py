"""DTO/스키마: 강아지 특징 서술자, 배치 입력, 분석 결과.

Pydantic v2 기반의 명확한 스키마로 모델 입/출력을 정규화한다.
모델이 돌려준 느슨한 JSON은 SightingAnalysis 검증을 통과해야만 결과로 인정한다.
"""

from __future__ import annotations

import enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _clean_text(v: Any) -> str:
    if v is None:
        return ""
    return str(v).strip()


def _clean_features(v: Any) -> List[str]:
    if v is None:
        return []
    if isinstance(v, str):
        v = [v]
    if not isinstance(v, (list, tuple)):
        raise ValueError("features는 문자열 리스트여야 합니다.")
    cleaned: List[str] = []
    for item in v:
        s = _clean_text(item)
        if s:
            cleaned.append(s)
    return cleaned


class LostOrFound(str, enum.Enum):
    LOST = "lost"
    FOUND = "found"
    UNKNOWN = "unknown"


class DogFeatureDescriptor(BaseModel):
    """사용자 강아지 프로필 또는 목격 게시글에서 추출한 강아지 특징."""

    model_config = ConfigDict(populate_by_name=True)

    breed: Optional[str] = None
    size: Optional[str] = None
    color: Optional[str] = None
    primary_color: Optional[str] = Field(default=None, alias="primaryColor")
    secondary_color: Optional[str] = Field(default=None, alias="secondaryColor")
    features: List[str] = Field(default_factory=list)
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0, description="추출 단계에서만 설정")

    @field_validator("features", mode="before")
    @classmethod
    def _features_cleanup(cls, v: Any) -> List[str]:
        return _clean_features(v)

    @property
    def effective_color(self) -> str:
        return self.color or self.primary_color or ""

    def is_empty(self) -> bool:
        return not (self.breed or self.size or self.effective_color or self.features)


class BatchItem(BaseModel):
    """배치 요청 단위. 모델 출력의 index와 위치로 1:1 대응한다."""

    model_config = ConfigDict(populate_by_name=True)

    img_url: str = Field(default="", alias="imgUrl")
    content: str = ""
    link: str = ""

    @field_validator("img_url", "content", "link", mode="before")
    @classmethod
    def _strip(cls, v: Any) -> str:
        return _clean_text(v)


class SightingAnalysis(BaseModel):
    """게시글 1건에 대한 모델 분석 결과 표준 스키마."""

    model_config = ConfigDict(populate_by_name=True)

    is_dog: bool = Field(..., alias="isDog")
    ai_match_score: float = Field(0.0, ge=0.0, le=1.0, alias="aiMatchScore")
    feature_match_score: float = Field(0.0, ge=0.0, le=1.0, alias="featureMatchScore")
    breed: str = ""
    size: str = ""
    color: str = ""
    features: List[str] = Field(default_factory=list)
    is_lost_or_found: LostOrFound = Field(LostOrFound.UNKNOWN, alias="isLostOrFound")

    @field_validator("ai_match_score", "feature_match_score", mode="before")
    @classmethod
    def _clamp_score(cls, v: Any) -> float:
        if v is None:
            return 0.0
        if isinstance(v, bool):
            raise ValueError("점수는 숫자여야 합니다.")
        try:
            value = float(v)
        except (TypeError, ValueError) as exc:
            raise ValueError("점수는 숫자여야 합니다.") from exc
        return min(1.0, max(0.0, value))

    @field_validator("breed", "size", "color", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _clean_text(v)

    @field_validator("features", mode="before")
    @classmethod
    def _features_cleanup(cls, v: Any) -> List[str]:
        return _clean_features(v)

    @field_validator("is_lost_or_found", mode="before")
    @classmethod
    def _lost_or_found(cls, v: Any) -> LostOrFound:
        try:
            return LostOrFound(_clean_text(v).lower())
        except ValueError:
            return LostOrFound.UNKNOWN

    def to_descriptor(self) -> DogFeatureDescriptor:
        return DogFeatureDescriptor(
            breed=self.breed or None,
            size=self.size or None,
            color=self.color or None,
            features=list(self.features),
        )
