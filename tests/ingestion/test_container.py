from __future__ import annotations

import json
from typing import Any, Dict, List

import pytest

from analysis.models.domain import BatchItem, DogFeatureDescriptor
from ingestion.connectors.base import ScanArea
from ingestion.container import ServiceContainer
from ingestion.models.domain import SightingSource
from ingestion.settings import get_settings
from llm.client.model_client import ImagePart, Part
from llm.settings import get_model_settings

POSTS = {
    "https://karrot/1": "하얀 푸들 봤어요",
    "https://karrot/2": "검정 진돗개",
}


async def _karrot(keyword: str, area: ScanArea) -> List[Dict[str, Any]]:
    return [{"link": link, "title": text, "content": text} for link, text in POSTS.items()]


async def _provider(model: str, parts: List[Part]) -> str:
    if any(isinstance(p, ImagePart) for p in parts):
        return json.dumps({"breed": "푸들", "size": "소형", "primaryColor": "하얀색", "features": []})
    return json.dumps(
        [
            {"index": 0, "isDog": True, "breed": "푸들", "size": "소형", "color": "하얀색"},
            {"index": 1, "isDog": True, "breed": "진돗개", "size": "중형", "color": "검정색"},
        ]
    )


@pytest.fixture
def container(model_env, monkeypatch) -> ServiceContainer:
    monkeypatch.setenv("SCAN_KEYWORDS", '["강아지"]')
    monkeypatch.setenv("RATE_LIMIT_REQUESTS", "5")
    return ServiceContainer.from_settings(
        settings=get_settings(),
        model_settings=get_model_settings(),
        provider=_provider,
        scrapers={SightingSource.KARROT: _karrot},
        configure_logs=False,
    )


def test_container_shares_one_governor(container):
    assert container.model_client.governor is container.governor
    assert container.analyzer.model_client is container.model_client
    assert container.profile_extractor.model_client is container.model_client
    assert container.governor.limit == 5
    assert container.usage() == {"current": 0, "limit": 5, "paused_for": 0.0}
    assert container.scan_area() == ScanArea(location="우면동", sido="서울특별시", sigungu="서초구")


@pytest.mark.asyncio
async def test_scan_analyze_notify_flow(container):
    summary = await container.scan()
    assert summary.new_by_source == {"Karrot": 2}

    profile = await container.extract_profile([ImagePart(data=b"owner-photo")])
    assert profile.breed == "푸들"

    assert await container.analyze(profile) == 2
    assert container.usage()["current"] == 2

    notes = container.notifications(profile)
    assert [n.link for n in notes] == ["https://karrot/1"]
    assert notes[0].score == pytest.approx(0.9)

    assert container.rescore(DogFeatureDescriptor(breed="진돗개", color="검은색")) == 2
    assert container.store.get("https://karrot/2").match_score == pytest.approx(0.7)


@pytest.mark.asyncio
async def test_scan_with_explicit_keywords(container):
    summary = await container.scan(["목격"], ScanArea(location="양재동"))
    assert summary.new_total == 2
    assert {r.keyword for r in summary.results} == {"목격"}


@pytest.mark.asyncio
async def test_analyze_batch_returns_aligned_results(container):
    items = [BatchItem(content="하얀 푸들", link="a"), BatchItem(content="검정 진돗개", link="b")]
    results = await container.analyze_batch(items)
    assert [r.breed for r in results] == ["푸들", "진돗개"]
    assert len(container.store) == 0
