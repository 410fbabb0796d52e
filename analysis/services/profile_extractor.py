"""Extract a DogFeatureDescriptor from the owner's photos."""

from __future__ import annotations

import json
import logging
from typing import Sequence

from pydantic import ValidationError

from analysis.models.domain import DogFeatureDescriptor
from analysis.parsing import extract_json_object
from analysis.prompts.templates import build_profile_parts
from llm.client.model_client import ImagePart, PermanentLLMError, ResilientModelClient

logger = logging.getLogger(__name__)


class ProfileExtractor:
    def __init__(self, model_client: ResilientModelClient, *, model: str) -> None:
        self.model_client = model_client
        self.model = model

    async def extract(self, images: Sequence[ImagePart]) -> DogFeatureDescriptor:
        if not images:
            raise ValueError("이미지가 최소 1개 필요합니다.")
        text = await self.model_client.generate(self.model, build_profile_parts(images))
        try:
            data = extract_json_object(text)
            if data is None:
                raise PermanentLLMError("프로필 응답에서 JSON 객체를 찾지 못했습니다.")
            profile = DogFeatureDescriptor.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as exc:
            raise PermanentLLMError("프로필 응답 JSON 파싱 실패") from exc
        logger.info(
            "profile.extracted",
            extra={"breed": profile.breed, "size": profile.size, "confidence": profile.confidence},
        )
        return profile
