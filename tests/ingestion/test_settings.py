import pytest

from ingestion.settings import Settings, get_settings, reset_settings_cache


def test_defaults(monkeypatch):
    for key in ("SCAN_KEYWORDS", "SCAN_LOCATION", "MATCH_NOTIFY_THRESHOLD", "LOG_JSON"):
        monkeypatch.delenv(key, raising=False)

    settings = get_settings()

    assert settings.scan_keywords == ["강아지", "유기견", "목격"]
    assert settings.scan_location == "우면동"
    assert settings.scan_sido == "서울특별시"
    assert settings.scan_sigungu == "서초구"
    assert settings.match_notify_threshold == 0.6
    assert settings.log_json is False


def test_keywords_from_environment_are_cleaned(monkeypatch):
    monkeypatch.setenv("SCAN_KEYWORDS", '[" 말티즈 ", "푸들", "말티즈"]')
    monkeypatch.setenv("SCAN_LOCATION", " 서초동 ")

    settings = get_settings()

    assert settings.scan_keywords == ["말티즈", "푸들"]
    assert settings.scan_location == "서초동"


def test_keywords_accept_python_list():
    settings = Settings(scan_keywords=["강아지", "  "])
    assert settings.scan_keywords == ["강아지"]


def test_invalid_threshold_raises(monkeypatch):
    monkeypatch.setenv("MATCH_NOTIFY_THRESHOLD", "1.5")
    with pytest.raises(RuntimeError):
        get_settings()


def test_blank_location_rejected(monkeypatch):
    monkeypatch.setenv("SCAN_LOCATION", "   ")
    with pytest.raises(RuntimeError) as exc:
        get_settings()
    assert "SCAN_LOCATION" in str(exc.value)


def test_cache_reset(monkeypatch):
    monkeypatch.setenv("SCAN_SIGUNGU", "강남구")
    first = get_settings()
    assert get_settings() is first
    monkeypatch.setenv("SCAN_SIGUNGU", "송파구")
    reset_settings_cache()
    assert get_settings().scan_sigungu == "송파구"
