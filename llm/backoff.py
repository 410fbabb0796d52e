"""Backoff policy for throttled model calls."""

from __future__ import annotations

import enum
import re
from typing import Optional

RETRY_HINT_MARGIN_SECONDS = 1.0

_HINT_RE = re.compile(r"^\s*(\d+)(?:\.\d+)?\s*s?\s*$")


class RetryState(str, enum.Enum):
    ATTEMPTING = "attempting"
    BACKOFF = "backoff"
    EXHAUSTED = "exhausted"
    SUCCEEDED = "succeeded"


def parse_retry_after(hint: Optional[str]) -> Optional[int]:
    """Parse a server retry hint such as ``"47s"`` into whole seconds."""
    if hint is None:
        return None
    match = _HINT_RE.match(str(hint))
    if not match:
        return None
    return int(match.group(1))


def compute_backoff(attempt: int, retry_after: Optional[str], base_delay_seconds: float) -> float:
    """Seconds to wait after a throttled ``attempt`` (0-based).

    A parseable server hint wins and gets a one second margin; a hint that is
    present but unreadable falls back to the base delay; no hint at all uses
    ``2 ** attempt * base_delay_seconds``.
    """
    seconds = parse_retry_after(retry_after)
    if seconds is not None:
        return seconds + RETRY_HINT_MARGIN_SECONDS
    if retry_after is not None:
        return float(base_delay_seconds)
    return float(2**attempt) * float(base_delay_seconds)
