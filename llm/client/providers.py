"""Provider adapters: SDK call + error classification into LLMError types.

A provider is ``async (model, parts) -> str``. Adapters translate the SDK's
throttling error into :class:`RateLimitedLLMError` (with the retry hint) and
every other API failure into :class:`PermanentLLMError`.
"""

from __future__ import annotations

import base64
from typing import Any, Dict, List, Optional

import httpx

from llm.client.model_client import (
    ImagePart,
    Part,
    PermanentLLMError,
    ProviderFn,
    RateLimitedLLMError,
)
from llm.settings import ModelSettings

_RETRY_INFO_TYPE = "type.googleapis.com/google.rpc.RetryInfo"


def gemini_retry_delay(details: Any) -> Optional[str]:
    """Find ``RetryInfo.retryDelay`` (e.g. ``"47s"``) in a Gemini error body."""
    if not isinstance(details, dict):
        return None
    body = details.get("error", details)
    entries = body.get("details") if isinstance(body, dict) else None
    for entry in entries or []:
        if not isinstance(entry, dict):
            continue
        if entry.get("@type") == _RETRY_INFO_TYPE or "retryDelay" in entry:
            delay = entry.get("retryDelay")
            if delay:
                return str(delay)
    return None


def openai_retry_after(headers: Any) -> Optional[str]:
    """Convert an HTTP ``retry-after`` header (seconds) into ``"<n>s"``."""
    if headers is None:
        return None
    raw = headers.get("retry-after")
    if raw is None:
        return None
    try:
        return f"{int(float(raw))}s"
    except (TypeError, ValueError):
        return None


def build_gemini_provider(api_key: str) -> ProviderFn:
    try:
        from google import genai  # type: ignore
        from google.genai import errors, types  # type: ignore
    except Exception as exc:  # pragma: no cover - 테스트에선 provider 주입
        raise PermanentLLMError("google-genai 라이브러리를 찾을 수 없습니다.") from exc

    client = genai.Client(api_key=api_key)

    def _to_content(part: Part) -> Any:
        if isinstance(part, ImagePart):
            return types.Part.from_bytes(data=part.data, mime_type=part.mime_type)
        return part

    async def _call(model: str, parts: List[Part]) -> str:  # pragma: no cover - 네트워크 미사용
        try:
            resp = await client.aio.models.generate_content(
                model=model,
                contents=[_to_content(p) for p in parts],
            )
        except errors.APIError as exc:
            if exc.code == 429:
                raise RateLimitedLLMError(str(exc), retry_after=gemini_retry_delay(exc.details)) from exc
            raise PermanentLLMError(f"Gemini 호출 실패: {exc}") from exc
        except httpx.HTTPError as exc:
            raise PermanentLLMError(f"Gemini 전송 오류: {exc}") from exc
        return resp.text or ""

    return _call


def _openai_content(parts: List[Part]) -> List[Dict[str, Any]]:
    content: List[Dict[str, Any]] = []
    for part in parts:
        if isinstance(part, ImagePart):
            encoded = base64.b64encode(part.data).decode("ascii")
            content.append(
                {"type": "image_url", "image_url": {"url": f"data:{part.mime_type};base64,{encoded}"}}
            )
        else:
            content.append({"type": "text", "text": part})
    return content


def build_openai_provider(api_key: str) -> ProviderFn:
    try:
        from openai import APIError, AsyncOpenAI, RateLimitError  # type: ignore
    except Exception as exc:  # pragma: no cover - 테스트에선 provider 주입
        raise PermanentLLMError("openai 라이브러리를 찾을 수 없습니다.") from exc

    client = AsyncOpenAI(api_key=api_key)

    async def _call(model: str, parts: List[Part]) -> str:  # pragma: no cover - 네트워크 미사용
        try:
            resp = await client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": _openai_content(parts)}],
            )
        except RateLimitError as exc:
            raise RateLimitedLLMError(str(exc), retry_after=openai_retry_after(exc.response.headers)) from exc
        except APIError as exc:
            raise PermanentLLMError(f"OpenAI 호출 실패: {exc}") from exc
        return resp.choices[0].message.content or ""

    return _call


def build_provider(settings: ModelSettings) -> ProviderFn:
    if settings.llm_provider == "openai":
        assert settings.openai_api_key is not None
        return build_openai_provider(settings.openai_api_key.get_secret_value())
    assert settings.google_api_key is not None
    return build_gemini_provider(settings.google_api_key.get_secret_value())
