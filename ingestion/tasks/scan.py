"""Scan stage: pull posts from every connector and upsert them into the store."""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from ingestion.connectors.base import ConnectorError, ScanArea, SightingConnector
from ingestion.models.domain import AnalyzedSighting
from ingestion.services.sighting_store import InMemorySightingStore
from ingestion.utils.logging import get_logger


@dataclass
class ScanSummary:
    results: List[AnalyzedSighting] = field(default_factory=list)
    new_by_source: Dict[str, int] = field(default_factory=dict)
    failed_sources: List[str] = field(default_factory=list)

    @property
    def new_total(self) -> int:
        return sum(self.new_by_source.values())


async def _fetch_safely(connector: SightingConnector, keyword: str, area: ScanArea, trace_id: str, logger):
    try:
        return await connector.fetch(keyword, area)
    except ConnectorError as exc:
        logger.warning(
            "scan.connector_failed",
            extra={"trace_id": trace_id, "source": connector.source.value, "keyword": keyword, "error": str(exc)},
        )
        return None


async def scan_core(
    store: InMemorySightingStore,
    connectors: Sequence[SightingConnector],
    keywords: Sequence[str],
    area: ScanArea | None = None,
) -> ScanSummary:
    """Run all connectors per keyword, upsert into ``store`` and summarise.

    Connectors for one keyword run concurrently. A failing connector yields
    nothing for that keyword and the scan carries on.
    """
    area = area or ScanArea()
    trace_id = str(uuid.uuid4())
    logger = get_logger(__name__)
    logger.info(
        "scan.start",
        extra={"trace_id": trace_id, "keywords": list(keywords), "sources": [c.source.value for c in connectors]},
    )
    summary = ScanSummary(new_by_source={c.source.value: 0 for c in connectors})
    seen_links: set[str] = set()
    fetched = 0

    for keyword in keywords:
        batches = await asyncio.gather(*(_fetch_safely(c, keyword, area, trace_id, logger) for c in connectors))
        for connector, items in zip(connectors, batches):
            if items is None:
                if connector.source.value not in summary.failed_sources:
                    summary.failed_sources.append(connector.source.value)
                continue
            fetched += len(items)
            for item in items:
                if store.add(item):
                    summary.new_by_source[connector.source.value] += 1
                if item.link in seen_links:
                    continue
                seen_links.add(item.link)
                merged = store.get(item.link)
                if merged is not None:
                    summary.results.append(merged)

    logger.info(
        "scan.saved",
        extra={
            "trace_id": trace_id,
            "fetched": fetched,
            "unique": len(summary.results),
            "new": summary.new_total,
            "failed_sources": summary.failed_sources,
        },
    )
    return summary
