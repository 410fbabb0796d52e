from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

from analysis.models.domain import DogFeatureDescriptor
from ingestion.models.domain import AnalyzedSighting
from matching.scorer import MatchBreakdown, explain

MATCH_NOTIFY_THRESHOLD = 0.6


@dataclass(frozen=True)
class RankedSighting:
    sighting: AnalyzedSighting
    breakdown: MatchBreakdown

    @property
    def score(self) -> float:
        return self.breakdown.score


@dataclass(frozen=True)
class MatchNotification:
    link: str
    score: float
    source: str | None
    title: str
    reasons: list[str]


def _sort_key(ranked: RankedSighting) -> tuple[float, datetime]:
    ts = ranked.sighting.timestamp
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ranked.score, ts


def rank_sightings(
    profile: DogFeatureDescriptor,
    sightings: Iterable[AnalyzedSighting],
) -> list[RankedSighting]:
    """Analysed sightings ordered by match score, newest first on ties."""
    ranked = [
        RankedSighting(sighting=s, breakdown=explain(profile, s.analysis))
        for s in sightings
        if s.analysis is not None
    ]
    ranked.sort(key=_sort_key, reverse=True)
    return ranked


def is_notifiable(ranked: RankedSighting, threshold: float = MATCH_NOTIFY_THRESHOLD) -> bool:
    analysis = ranked.sighting.analysis
    if analysis is None or not analysis.is_dog:
        return False
    return ranked.score > threshold


def select_match_notifications(
    profile: DogFeatureDescriptor,
    sightings: Iterable[AnalyzedSighting],
    *,
    threshold: float = MATCH_NOTIFY_THRESHOLD,
) -> list[MatchNotification]:
    notifications: list[MatchNotification] = []
    for ranked in rank_sightings(profile, sightings):
        if not is_notifiable(ranked, threshold):
            continue
        s = ranked.sighting
        notifications.append(
            MatchNotification(
                link=s.link,
                score=ranked.score,
                source=s.source.value if s.source is not None else None,
                title=s.title,
                reasons=ranked.breakdown.reasons(),
            )
        )
    return notifications
