"""Batch analysis: N posts -> one model call -> N positionally aligned results."""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from typing import List, Optional, Sequence

import httpx
from pydantic import ValidationError

from analysis.models.domain import BatchItem, DogFeatureDescriptor, SightingAnalysis
from analysis.parsing import parse_batch_response
from analysis.prompts.templates import build_batch_parts
from llm.client.model_client import ImagePart, LLMError, ResilientModelClient

DEFAULT_IMAGE_MIME = "image/jpeg"


def is_fetchable_image_url(url: str) -> bool:
    """Inline ``data:`` URIs and blanks are not fetched."""
    u = (url or "").strip()
    if not u or u.startswith("data:") or "data:image" in u:
        return False
    return u.startswith(("http://", "https://"))


class BatchAnalyzer:
    """Fetch images, build one multimodal prompt and map results back by index."""

    def __init__(
        self,
        model_client: ResilientModelClient,
        *,
        model: str,
        http_client: Optional[httpx.AsyncClient] = None,
        image_timeout_seconds: float = 10.0,
    ) -> None:
        self.model_client = model_client
        self.model = model
        self._http_client = http_client
        self.image_timeout_seconds = image_timeout_seconds
        self.logger = logging.getLogger(__name__)

    async def fetch_image(self, client: httpx.AsyncClient, item: BatchItem) -> Optional[ImagePart]:
        if not is_fetchable_image_url(item.img_url):
            return None
        try:
            resp = await client.get(item.img_url, timeout=self.image_timeout_seconds, follow_redirects=True)
        except httpx.HTTPError as exc:
            self.logger.warning("batch.image_fetch_failed", extra={"link": item.link, "error": str(exc)})
            return None
        if not resp.is_success:
            self.logger.warning(
                "batch.image_fetch_failed",
                extra={"link": item.link, "status_code": resp.status_code},
            )
            return None
        mime = resp.headers.get("content-type", DEFAULT_IMAGE_MIME).split(";")[0].strip() or DEFAULT_IMAGE_MIME
        return ImagePart(data=resp.content, mime_type=mime)

    async def _fetch_images(self, items: Sequence[BatchItem]) -> List[Optional[ImagePart]]:
        if self._http_client is not None:
            return list(await asyncio.gather(*(self.fetch_image(self._http_client, it) for it in items)))
        async with httpx.AsyncClient() as client:
            return list(await asyncio.gather(*(self.fetch_image(client, it) for it in items)))

    async def analyze(
        self,
        items: Sequence[BatchItem],
        profile: Optional[DogFeatureDescriptor] = None,
    ) -> List[Optional[SightingAnalysis]]:
        """Return a list aligned with ``items``; ``None`` where no result exists.

        Unrecoverable failures degrade the whole batch to ``None`` entries.
        """
        if not items:
            return []
        trace_id = uuid.uuid4().hex
        extra = {"trace_id": trace_id, "items": len(items)}
        try:
            images = await self._fetch_images(items)
            parts = build_batch_parts(items, images, profile)
            self.logger.info(
                "batch.start",
                extra={**extra, "images": sum(1 for i in images if i is not None)},
            )
            text = await self.model_client.generate(self.model, parts)
            by_index = parse_batch_response(text, len(items))
        except (LLMError, httpx.HTTPError, json.JSONDecodeError, ValidationError) as exc:
            self.logger.warning("batch.failed", extra={**extra, "error": str(exc), "error_type": type(exc).__name__})
            return [None] * len(items)

        self.logger.info("batch.done", extra={**extra, "results": len(by_index)})
        return [by_index.get(i) for i in range(len(items))]
