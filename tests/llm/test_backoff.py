from __future__ import annotations

import pytest

from llm.backoff import compute_backoff, parse_retry_after


@pytest.mark.parametrize(
    "hint,expected",
    [("47s", 47), ("5s", 5), (" 12s ", 12), ("3", 3), ("1.5s", 1), ("abc", None), ("", None), (None, None)],
)
def test_parse_retry_after(hint, expected):
    assert parse_retry_after(hint) == expected


def test_server_hint_wins_with_one_second_margin():
    assert compute_backoff(0, "5s", 5.0) == 6.0
    assert compute_backoff(2, "5s", 5.0) == 6.0


def test_exponential_fallback_without_hint():
    assert [compute_backoff(a, None, 5.0) for a in range(3)] == [5.0, 10.0, 20.0]


def test_unreadable_hint_uses_base_delay():
    assert compute_backoff(2, "soon", 5.0) == 5.0
