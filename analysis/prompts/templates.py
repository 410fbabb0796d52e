"""프롬프트 템플릿/빌더.

배치 분석: 지시문 1개 + 항목별 (헤더, 본문, 이미지) 파트를 입력 순서대로 나열한다.
이미지를 못 가져온 항목도 헤더/본문으로 자기 위치를 차지한다.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from analysis.models.domain import BatchItem, DogFeatureDescriptor
from llm.client.model_client import ImagePart, Part

BATCH_JSON_SCHEMA_SNIPPET = (
    "{"
    '"index": integer (item number shown in the header), '
    '"isDog": boolean, '
    '"aiMatchScore": number (0.0..1.0, how likely the post is a genuine dog sighting/found report), '
    '"featureMatchScore": number (0.0..1.0, how much the dog looks like the user\'s dog), '
    '"breed": string (Korean), '
    '"size": "소형" | "중형" | "대형", '
    '"color": string (Korean), '
    '"features": array<string> (unique distinguishing marks), '
    '"isLostOrFound": "lost" | "found" | "unknown"'
    "}"
)

PROFILE_EXTRACTION_PROMPT = (
    "You are an expert dog behaviorist and breed specialist.\n"
    "Analyze the provided images of a dog and extract the following features in JSON format "
    "(values must be in Korean):\n"
    "{\n"
    '  "breed": "품종 이름 (불확실하면 \'믹스견\')",\n'
    '  "size": "소형/중형/대형",\n'
    '  "primaryColor": "주된 털 색상 (예: 하얀색, 갈색, 검정색)",\n'
    '  "secondaryColor": "보조 털 색상 (있을 경우)",\n'
    '  "features": ["인식 가능한 특징 (목줄, 상처, 패턴 등)"],\n'
    '  "confidence": 0.0 to 1.0\n'
    "}\n"
    "Be as specific as possible. If multiple dogs are present, focus on the most prominent one.\n"
    "Output ONLY the JSON."
)


def item_header(index: int) -> str:
    return f"--- ITEM {index} ---"


def describe_profile(profile: Optional[DogFeatureDescriptor]) -> str:
    if profile is None or profile.is_empty():
        return "No specific dog profile provided. Analyze general relevance."
    colors = " ".join(c for c in (profile.effective_color, profile.secondary_color or "") if c)
    lines = [
        "The user is looking for a dog with these characteristics:",
        f"- Breed: {profile.breed or 'unknown'}",
        f"- Size: {profile.size or 'unknown'}",
        f"- Color: {colors or 'unknown'}",
        f"- Features: {', '.join(profile.features) or 'none'}",
    ]
    return "\n".join(lines)


def build_batch_instructions(profile: Optional[DogFeatureDescriptor]) -> str:
    return (
        "You are an expert dog behaviorist analyzing community posts for lost/found dogs.\n"
        "Analyze the provided items (each item has a text description and potentially an image).\n"
        "Determine if they match the lost dog described below.\n\n"
        f"{describe_profile(profile)}\n\n"
        "For EACH item, return a JSON object with this schema: "
        f"{BATCH_JSON_SCHEMA_SNIPPET}.\n"
        "Return ONLY a JSON array of these objects, one per item."
    )


def build_batch_parts(
    items: Sequence[BatchItem],
    images: Sequence[Optional[ImagePart]],
    profile: Optional[DogFeatureDescriptor] = None,
) -> List[Part]:
    """Interleave instruction, per-item header/description and optional image."""
    if len(items) != len(images):
        raise ValueError("items와 images의 길이가 같아야 합니다.")
    parts: List[Part] = [build_batch_instructions(profile)]
    for idx, (item, image) in enumerate(zip(items, images)):
        parts.append(item_header(idx))
        parts.append(f'Description: "{item.content}"')
        if image is not None:
            parts.append(image)
    return parts


def build_profile_parts(images: Sequence[ImagePart]) -> List[Part]:
    return [PROFILE_EXTRACTION_PROMPT, *images]
