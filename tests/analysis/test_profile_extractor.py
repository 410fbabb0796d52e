from __future__ import annotations

from typing import List

import pytest

from analysis.prompts.templates import PROFILE_EXTRACTION_PROMPT
from analysis.services.profile_extractor import ProfileExtractor
from llm.client.model_client import ImagePart, Part, PermanentLLMError, ResilientModelClient
from llm.governor import ThroughputGovernor


def _extractor(clock, reply: str, seen: List[List[Part]] | None = None) -> ProfileExtractor:
    async def provider(model: str, parts: List[Part]) -> str:
        if seen is not None:
            seen.append(parts)
        return reply

    gov = ThroughputGovernor(clock=clock, sleep=clock.sleep)
    return ProfileExtractor(ResilientModelClient(gov, provider, sleep=clock.sleep), model="gemini-2.5-flash")


@pytest.mark.asyncio
async def test_extract_profile(clock):
    seen: List[List[Part]] = []
    reply = (
        "```json\n"
        '{"breed": "푸들", "size": "소형", "primaryColor": "하얀색", "secondaryColor": "",'
        ' "features": ["빨간 목줄"], "confidence": 0.85}\n'
        "```"
    )
    photo = ImagePart(data=b"photo")
    profile = await _extractor(clock, reply, seen).extract([photo])

    assert profile.breed == "푸들"
    assert profile.effective_color == "하얀색"
    assert profile.features == ["빨간 목줄"]
    assert profile.confidence == pytest.approx(0.85)
    assert seen == [[PROFILE_EXTRACTION_PROMPT, photo]]


@pytest.mark.asyncio
async def test_extract_requires_images(clock):
    with pytest.raises(ValueError):
        await _extractor(clock, "{}").extract([])


@pytest.mark.asyncio
@pytest.mark.parametrize("reply", ["I see a dog.", '{"breed": "푸들",}', '{"confidence": 7}'])
async def test_unusable_reply_is_permanent_error(clock, reply):
    with pytest.raises(PermanentLLMError):
        await _extractor(clock, reply).extract([ImagePart(data=b"x")])
