from __future__ import annotations

from datetime import datetime, timedelta, timezone

from analysis.models.domain import DogFeatureDescriptor, SightingAnalysis
from ingestion.models.domain import AnalyzedSighting, SightingSource
from publish.notifier import rank_sightings, select_match_notifications

NOW = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)

PROFILE = DogFeatureDescriptor(breed="푸들", size="소형", color="하얀색", features=["빨간 목줄"])


def _sighting(link: str, *, is_dog: bool = True, minutes_ago: int = 0, **analysis) -> AnalyzedSighting:
    return AnalyzedSighting(
        link=link,
        title=f"title {link}",
        source=SightingSource.KARROT,
        timestamp=NOW - timedelta(minutes=minutes_ago),
        analysis=SightingAnalysis(is_dog=is_dog, **analysis),
    )


def test_rank_orders_by_score_then_recency():
    full = _sighting("full", breed="푸들", size="소형", color="하얀색", features=["목줄"], minutes_ago=30)
    older = _sighting("older", breed="푸들", minutes_ago=20)
    newer = _sighting("newer", breed="푸들", minutes_ago=5)
    pending = AnalyzedSighting(link="pending")

    ranked = rank_sightings(PROFILE, [older, pending, newer, full])

    assert [r.sighting.link for r in ranked] == ["full", "newer", "older"]
    assert ranked[0].score == 1.0


def test_naive_timestamps_sort_with_aware_ones():
    naive = _sighting("naive", breed="푸들")
    naive = naive.model_copy(update={"timestamp": datetime(2026, 10, 1, 13, 0)})
    aware = _sighting("aware", breed="푸들")
    assert [r.sighting.link for r in rank_sightings(PROFILE, [aware, naive])] == ["naive", "aware"]


def test_notifications_require_dog_and_score_above_threshold():
    strong = _sighting("strong", breed="푸들", size="소형", color="흰색")
    exactly_threshold = _sighting("edge", breed="푸들", size="소형", color="", features=[])
    not_dog = _sighting("cat", is_dog=False, breed="푸들", size="소형", color="하얀색")
    weak = _sighting("weak", breed="진돗개", size="대형")

    # "edge" scores exactly 0.7
    notes = select_match_notifications(PROFILE, [strong, exactly_threshold, not_dog, weak], threshold=0.7)

    assert [n.link for n in notes] == ["strong"]
    note = notes[0]
    assert note.score == 0.9
    assert note.source == "Karrot"
    assert note.title == "title strong"
    assert note.reasons == ["품종 일치", "크기 일치", "색상 일치"]


def test_default_threshold():
    good = _sighting("good", breed="푸들", size="소형")
    poor = _sighting("poor", breed="푸들")
    assert [n.link for n in select_match_notifications(PROFILE, [good, poor])] == ["good"]
