"""멀티모달 모델 호출 래퍼.

특징
- 공유 ThroughputGovernor를 통해서만 호출(호출 전 슬롯 대기)
- 429(Too Many Requests)는 서버 retryDelay 또는 지수 백오프로 재시도하고,
  governor.pause()로 다른 호출자까지 함께 쉬게 한다
- 그 외 오류는 재시도 없이 즉시 전파
- Provider 주입으로 테스트 시 네트워크/실제 의존성 제거
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Sequence, Union

from llm.backoff import RetryState, compute_backoff
from llm.governor import SleepFn, ThroughputGovernor
from llm.settings import ModelSettings, get_model_settings


class LLMError(Exception):
    """모델 호출 관련 기본 오류."""


class TransientLLMError(LLMError):
    """일시 오류(재시도 대상)."""


class RateLimitedLLMError(TransientLLMError):
    """서버가 요청 과다(429)를 보고함. retry_after는 "47s" 형태의 힌트."""

    def __init__(self, message: str = "요청 한도 초과(429)", *, retry_after: Optional[str] = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class RateLimitTimeoutError(TransientLLMError):
    """Governor가 대기 시간 안에 호출 슬롯을 내주지 못함."""


class PermanentLLMError(LLMError):
    """영구 오류(재시도 불가)."""


@dataclass(frozen=True)
class ImagePart:
    """Inline binary image payload tagged with its MIME type."""

    data: bytes
    mime_type: str = "image/jpeg"


Part = Union[str, ImagePart]
ProviderFn = Callable[[str, List[Part]], Awaitable[str]]


class ResilientModelClient:
    """One logical "generate" call with governed, bounded retries."""

    def __init__(
        self,
        governor: ThroughputGovernor,
        provider: ProviderFn,
        *,
        max_attempts: int = 3,
        base_delay_seconds: float = 5.0,
        wait_timeout_seconds: float = 60.0,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.governor = governor
        self.provider = provider
        self.max_attempts = max_attempts
        self.base_delay_seconds = base_delay_seconds
        self.wait_timeout_seconds = wait_timeout_seconds
        self._sleep = sleep
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_settings(
        cls,
        governor: ThroughputGovernor,
        settings: Optional[ModelSettings] = None,
        provider: Optional[ProviderFn] = None,
    ) -> "ResilientModelClient":
        cfg = settings or get_model_settings()
        if provider is None:
            from llm.client.providers import build_provider

            provider = build_provider(cfg)
        return cls(
            governor,
            provider,
            max_attempts=int(cfg.analysis_retry_max_attempts),
            base_delay_seconds=float(cfg.analysis_backoff_base_seconds),
            wait_timeout_seconds=float(cfg.rate_limit_wait_timeout_seconds),
        )

    async def generate(self, model: str, parts: Sequence[Part], *, max_attempts: Optional[int] = None) -> str:
        """Return the raw response text; structural parsing is the caller's job."""
        attempts_allowed = int(max_attempts if max_attempts is not None else self.max_attempts)
        payload = list(parts)
        extra = {"model": model, "parts": len(payload)}

        state = RetryState.ATTEMPTING
        attempt = 0
        wait_seconds = 0.0
        text = ""
        last_exc: Optional[RateLimitedLLMError] = None

        while True:
            if state is RetryState.ATTEMPTING:
                if not await self.governor.wait_acquire(self.wait_timeout_seconds):
                    raise RateLimitTimeoutError("Rate limit wait timeout")
                try:
                    text = await self.provider(model, payload)
                except RateLimitedLLMError as exc:
                    last_exc = exc
                    wait_seconds = compute_backoff(attempt, exc.retry_after, self.base_delay_seconds)
                    self.governor.pause(wait_seconds)
                    state = RetryState.EXHAUSTED if attempt + 1 >= attempts_allowed else RetryState.BACKOFF
                    self.logger.warning(
                        "model.rate_limited",
                        extra={
                            **extra,
                            "attempt": attempt + 1,
                            "max_attempts": attempts_allowed,
                            "wait_seconds": wait_seconds,
                            "retry_after": exc.retry_after,
                        },
                    )
                    continue
                except LLMError as exc:
                    self.logger.error(
                        "model.error",
                        extra={**extra, "attempt": attempt + 1, "error": str(exc)},
                    )
                    raise
                state = RetryState.SUCCEEDED
            elif state is RetryState.BACKOFF:
                await self._sleep(wait_seconds)
                attempt += 1
                state = RetryState.ATTEMPTING
            elif state is RetryState.SUCCEEDED:
                self.logger.debug("model.ok", extra={**extra, "attempts": attempt + 1})
                return text
            else:
                assert last_exc is not None
                raise last_exc
