from __future__ import annotations

import pytest

from llm.settings import get_model_settings, reset_model_settings_cache


def test_defaults(model_env):
    s = get_model_settings()
    assert s.llm_provider == "gemini"
    assert s.rate_limit_requests == 20
    assert s.rate_limit_window_seconds == 60.0
    assert s.rate_limit_poll_interval_seconds == 3.0
    assert s.analysis_retry_max_attempts == 3
    assert s.analysis_backoff_base_seconds == 5.0
    assert s.google_api_key is not None
    assert s.google_api_key.get_secret_value() == "g-test-123"


def test_requests_per_window_limit_is_configurable(model_env, monkeypatch):
    monkeypatch.setenv("RATE_LIMIT_REQUESTS", "30")
    reset_model_settings_cache()
    assert get_model_settings().rate_limit_requests == 30


def test_missing_provider_key_raises(model_env, monkeypatch):
    monkeypatch.setenv("LLM_PROVIDER", "openai")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    reset_model_settings_cache()
    with pytest.raises(RuntimeError) as exc:
        get_model_settings()
    assert "API 키" in str(exc.value)


def test_openai_provider_with_key(model_env, monkeypatch):
    monkeypatch.setenv("LLM_PROVIDER", "openai")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    reset_model_settings_cache()
    assert get_model_settings().llm_provider == "openai"


def test_settings_are_cached_until_reset(model_env, monkeypatch):
    first = get_model_settings()
    monkeypatch.setenv("ANALYSIS_MODEL", "gemini-2.5-pro")
    assert get_model_settings() is first
    reset_model_settings_cache()
    assert get_model_settings().analysis_model == "gemini-2.5-pro"
