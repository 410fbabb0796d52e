from __future__ import annotations

import sys
from pathlib import Path
from typing import List

import pytest

ROOT = Path(__file__).resolve().parents[1]

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from llm.settings import reset_model_settings_cache  # noqa: E402
from ingestion.settings import reset_settings_cache  # noqa: E402


class FakeClock:
    """Manual clock whose async sleep advances time instead of waiting."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def model_env(monkeypatch: pytest.MonkeyPatch):
    reset_model_settings_cache()
    monkeypatch.setenv("LLM_PROVIDER", "gemini")
    monkeypatch.setenv("GOOGLE_GENERATIVE_AI_API_KEY", "g-test-123")
    monkeypatch.setenv("ANALYSIS_MODEL", "gemini-2.5-flash-lite")
    monkeypatch.setenv("RATE_LIMIT_REQUESTS", "20")
    monkeypatch.setenv("ANALYSIS_RETRY_MAX_ATTEMPTS", "3")
    yield
    reset_model_settings_cache()


@pytest.fixture(autouse=True)
def _reset_ingestion_settings():
    reset_settings_cache()
    yield
    reset_settings_cache()
