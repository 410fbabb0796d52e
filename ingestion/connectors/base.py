"""Scraper adapter: normalise raw post dicts from an external scraper."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

from pydantic import ValidationError

from ingestion.models.domain import AnalyzedSighting, SightingSource
from ingestion.utils.logging import get_logger


class ConnectorError(Exception):
    """Scraper (external collaborator) failure."""


@dataclass(frozen=True)
class ScanArea:
    location: str = "우면동"
    sido: str = "서울특별시"
    sigungu: str = "서초구"
    latitude: Optional[float] = None
    longitude: Optional[float] = None


ScraperFn = Callable[[str, ScanArea], Awaitable[List[Dict[str, Any]]]]


class SightingConnector:
    """Wraps one site's scraper and turns its output into tagged sightings.

    The scraper itself (browser automation) lives outside this package; it is
    injected as an async callable returning raw dicts with ``title``,
    ``content``, ``region``, ``imgUrl``, ``link`` and optionally ``timestamp``.
    """

    def __init__(self, source: SightingSource, scraper: ScraperFn) -> None:
        self.source = source
        self._scraper = scraper
        self.logger = get_logger(__name__)

    async def fetch(self, keyword: str, area: ScanArea) -> List[AnalyzedSighting]:
        try:
            raw = await self._scraper(keyword, area)
        except ConnectorError:
            raise
        except Exception as exc:
            raise ConnectorError(f"{self.source.value} 스크래핑 실패: {exc}") from exc
        return self._normalize_and_dedupe(keyword, raw or [])

    def _normalize_and_dedupe(self, keyword: str, items: Iterable[Dict[str, Any]]) -> List[AnalyzedSighting]:
        seen: set[str] = set()
        normalized: List[AnalyzedSighting] = []
        for item in items:
            sighting = self._normalize_item(keyword, item)
            if sighting is None or sighting.link in seen:
                continue
            seen.add(sighting.link)
            normalized.append(sighting)
        return normalized

    def _normalize_item(self, keyword: str, item: Dict[str, Any]) -> Optional[AnalyzedSighting]:
        link = str(item.get("link") or item.get("url") or "").strip()
        if not link:
            self.logger.info("connector.skip_no_link", extra={"source": self.source.value})
            return None
        fields: Dict[str, Any] = {
            "link": link,
            "title": item.get("title"),
            "content": item.get("content") or item.get("body"),
            "region": item.get("region"),
            "img_url": item.get("imgUrl") or item.get("img_url"),
            "source": self.source,
            "keyword": keyword,
        }
        # 게시 시각이 없으면 수집 시각이 기본값이고, 재수집 시 기존 값은 유지된다.
        if item.get("timestamp"):
            fields["timestamp"] = item["timestamp"]
        try:
            return AnalyzedSighting(**fields)
        except ValidationError as exc:
            self.logger.warning(
                "connector.invalid_item",
                extra={"source": self.source.value, "link": link, "error": str(exc)},
            )
            return None
