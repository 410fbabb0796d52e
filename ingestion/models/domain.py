"""Domain DTOs for the sighting ingestion pipeline."""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from analysis.models.domain import BatchItem, SightingAnalysis


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SightingSource(str, enum.Enum):
    KARROT = "Karrot"
    PAW_IN_HAND = "PawInHand"


class RawPost(BaseModel):
    """Scraped candidate post. ``link`` is the canonical identity of the post."""

    model_config = ConfigDict(populate_by_name=True)

    link: str = Field(..., description="원문 게시글 URL (중복 판단 키)")
    title: str = ""
    content: str = ""
    region: str = ""
    img_url: str = Field(default="", alias="imgUrl")
    timestamp: datetime = Field(default_factory=_now, description="게시 시각, 없으면 수집 시각")

    @field_validator("link")
    @classmethod
    def _link_non_empty(cls, v: str) -> str:
        s = v.strip()
        if not s:
            raise ValueError("link는 공백일 수 없습니다.")
        return s

    @field_validator("title", "content", "region", "img_url", mode="before")
    @classmethod
    def _strip(cls, v: Any) -> str:
        return "" if v is None else str(v).strip()

    @field_validator("timestamp", mode="before")
    @classmethod
    def _default_timestamp(cls, v: Any) -> Any:
        if v in (None, ""):
            return _now()
        return v


class AnalyzedSighting(RawPost):
    """RawPost plus origin metadata and, once available, the model analysis."""

    source: Optional[SightingSource] = None
    keyword: str = ""
    analysis: Optional[SightingAnalysis] = None
    match_score: Optional[float] = Field(default=None, ge=0.0, le=1.0, alias="matchScore")

    def to_batch_item(self) -> BatchItem:
        return BatchItem(img_url=self.img_url, content=self.content or self.title, link=self.link)
