"""Composition root: builds the shared governor, client and store once."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from analysis.models.domain import BatchItem, DogFeatureDescriptor, SightingAnalysis
from analysis.services.batch_analyzer import BatchAnalyzer
from analysis.services.profile_extractor import ProfileExtractor
from analysis.tasks.analyze import analyze_pending, rescore_all
from ingestion.connectors.base import ScanArea, ScraperFn, SightingConnector
from ingestion.models.domain import SightingSource
from ingestion.services.sighting_store import InMemorySightingStore
from ingestion.settings import Settings, get_settings
from ingestion.tasks.scan import ScanSummary, scan_core
from ingestion.utils.logging import configure_logging
from llm.client.model_client import ImagePart, ProviderFn, ResilientModelClient
from llm.governor import ThroughputGovernor
from llm.settings import ModelSettings, get_model_settings
from publish.notifier import MatchNotification, select_match_notifications


@dataclass
class ServiceContainer:
    """Explicitly constructed process-wide services.

    Every handler receives this container instead of reaching for module-level
    singletons, so tests can build a fresh one per case.
    """

    settings: Settings
    model_settings: ModelSettings
    governor: ThroughputGovernor
    model_client: ResilientModelClient
    store: InMemorySightingStore
    analyzer: BatchAnalyzer
    profile_extractor: ProfileExtractor
    connectors: List[SightingConnector] = field(default_factory=list)

    @classmethod
    def from_settings(
        cls,
        *,
        settings: Optional[Settings] = None,
        model_settings: Optional[ModelSettings] = None,
        provider: Optional[ProviderFn] = None,
        scrapers: Optional[Mapping[SightingSource, ScraperFn]] = None,
        configure_logs: bool = True,
    ) -> "ServiceContainer":
        cfg = settings or get_settings()
        mcfg = model_settings or get_model_settings()
        if configure_logs:
            configure_logging(cfg.log_level, json_enabled=cfg.log_json)

        governor = ThroughputGovernor(
            limit=int(mcfg.rate_limit_requests),
            window_seconds=float(mcfg.rate_limit_window_seconds),
            poll_interval_seconds=float(mcfg.rate_limit_poll_interval_seconds),
        )
        client = ResilientModelClient.from_settings(governor, mcfg, provider=provider)
        connectors = [SightingConnector(source, fn) for source, fn in (scrapers or {}).items()]
        return cls(
            settings=cfg,
            model_settings=mcfg,
            governor=governor,
            model_client=client,
            store=InMemorySightingStore(),
            analyzer=BatchAnalyzer(
                client,
                model=mcfg.analysis_model,
                image_timeout_seconds=float(mcfg.image_fetch_timeout_seconds),
            ),
            profile_extractor=ProfileExtractor(client, model=mcfg.profile_model),
            connectors=connectors,
        )

    def scan_area(self) -> ScanArea:
        return ScanArea(
            location=self.settings.scan_location,
            sido=self.settings.scan_sido,
            sigungu=self.settings.scan_sigungu,
        )

    async def scan(self, keywords: Optional[Sequence[str]] = None, area: Optional[ScanArea] = None) -> ScanSummary:
        return await scan_core(
            self.store,
            self.connectors,
            list(keywords) if keywords else self.settings.scan_keywords,
            area or self.scan_area(),
        )

    async def analyze(self, profile: Optional[DogFeatureDescriptor] = None) -> int:
        return await analyze_pending(
            self.store,
            self.analyzer,
            profile,
            batch_size=int(self.model_settings.analysis_batch_size),
        )

    async def analyze_batch(
        self,
        items: Sequence[BatchItem],
        profile: Optional[DogFeatureDescriptor] = None,
    ) -> List[Optional[SightingAnalysis]]:
        return await self.analyzer.analyze(items, profile)

    async def extract_profile(self, images: Sequence[ImagePart]) -> DogFeatureDescriptor:
        return await self.profile_extractor.extract(images)

    def rescore(self, profile: DogFeatureDescriptor) -> int:
        return rescore_all(self.store, profile)

    def notifications(self, profile: DogFeatureDescriptor) -> List[MatchNotification]:
        return select_match_notifications(
            profile,
            self.store.get_all(),
            threshold=self.settings.match_notify_threshold,
        )

    def usage(self) -> Dict[str, float]:
        u = self.governor.usage()
        return {"current": u.current, "limit": u.limit, "paused_for": u.paused_for}
