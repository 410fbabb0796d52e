"""Sliding-window throughput governor for model calls.

One instance is shared by every call site that talks to the model so that a
cooldown observed by one caller (HTTP 429) holds back all the others.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Awaitable, Callable, Deque

ClockFn = Callable[[], float]
SleepFn = Callable[[float], Awaitable[None]]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GovernorUsage:
    current: int
    limit: int
    paused_for: float


class ThroughputGovernor:
    """Allow at most ``limit`` acquisitions per rolling ``window_seconds``."""

    def __init__(
        self,
        limit: int = 20,
        window_seconds: float = 60.0,
        *,
        poll_interval_seconds: float = 3.0,
        clock: ClockFn = time.monotonic,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        if limit <= 0:
            raise ValueError("limit은 1 이상이어야 합니다.")
        if window_seconds <= 0:
            raise ValueError("window_seconds는 0보다 커야 합니다.")
        self.limit = limit
        self.window_seconds = float(window_seconds)
        self.poll_interval_seconds = float(poll_interval_seconds)
        self._clock = clock
        self._sleep = sleep
        self._calls: Deque[float] = deque()
        self._paused_until = 0.0
        self._lock = threading.Lock()

    def _evict(self, now: float) -> None:
        threshold = now - self.window_seconds
        while self._calls and self._calls[0] <= threshold:
            self._calls.popleft()

    def try_acquire(self) -> bool:
        with self._lock:
            now = self._clock()
            self._evict(now)
            if now < self._paused_until:
                logger.debug(
                    "governor.paused",
                    extra={"remaining_seconds": round(self._paused_until - now, 3)},
                )
                return False
            if len(self._calls) >= self.limit:
                logger.warning(
                    "governor.rate_limited",
                    extra={"current": len(self._calls), "limit": self.limit},
                )
                return False
            self._calls.append(now)
            return True

    def pause(self, duration_seconds: float) -> None:
        """Block all acquisitions for ``duration_seconds`` from now."""
        with self._lock:
            self._paused_until = self._clock() + max(0.0, float(duration_seconds))
        logger.info("governor.pause", extra={"duration_seconds": duration_seconds})

    def is_paused(self) -> bool:
        with self._lock:
            return self._clock() < self._paused_until

    async def wait_acquire(self, timeout_seconds: float = 60.0) -> bool:
        """Poll ``try_acquire`` until it succeeds or ``timeout_seconds`` elapse."""
        start = self._clock()
        while True:
            if self.try_acquire():
                return True
            remaining = timeout_seconds - (self._clock() - start)
            if remaining <= 0:
                logger.warning("governor.wait_timeout", extra={"timeout_seconds": timeout_seconds})
                return False
            await self._sleep(min(self.poll_interval_seconds, remaining))

    def usage(self) -> GovernorUsage:
        with self._lock:
            now = self._clock()
            self._evict(now)
            return GovernorUsage(
                current=len(self._calls),
                limit=self.limit,
                paused_for=max(0.0, self._paused_until - now),
            )
