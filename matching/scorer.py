"""Deterministic weighted match score between two dog descriptors.

Weights (total 10): breed 5 exact / 3 partial, size 2, color 2, features 1.
Empty attributes never match.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Union

from analysis.models.domain import DogFeatureDescriptor, SightingAnalysis
from matching.vocabulary import normalize_breed, normalize_color, normalize_size

TOTAL_WEIGHT = 10
BREED_EXACT_WEIGHT = 5
BREED_PARTIAL_WEIGHT = 3
SIZE_WEIGHT = 2
COLOR_WEIGHT = 2
FEATURE_WEIGHT = 1

DescriptorLike = Union[DogFeatureDescriptor, SightingAnalysis, Mapping[str, Any]]


@dataclass(frozen=True)
class MatchBreakdown:
    breed: int = 0
    size: int = 0
    color: int = 0
    features: int = 0
    common_features: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.breed + self.size + self.color + self.features

    @property
    def score(self) -> float:
        return self.total / TOTAL_WEIGHT

    def reasons(self) -> List[str]:
        out: List[str] = []
        if self.breed == BREED_EXACT_WEIGHT:
            out.append("품종 일치")
        elif self.breed:
            out.append("품종 부분 일치")
        if self.size:
            out.append("크기 일치")
        if self.color:
            out.append("색상 일치")
        if self.features:
            out.append("특징 일치: " + ", ".join(self.common_features))
        return out


def as_descriptor(value: DescriptorLike) -> DogFeatureDescriptor:
    if isinstance(value, DogFeatureDescriptor):
        return value
    if isinstance(value, SightingAnalysis):
        return value.to_descriptor()
    return DogFeatureDescriptor.model_validate(dict(value))


def _overlaps(a: str, b: str) -> bool:
    return bool(a) and bool(b) and (a in b or b in a)


def explain(target: DescriptorLike, candidate: DescriptorLike) -> MatchBreakdown:
    t = as_descriptor(target)
    c = as_descriptor(candidate)

    b1, b2 = normalize_breed(t.breed), normalize_breed(c.breed)
    if b1 and b1 == b2:
        breed = BREED_EXACT_WEIGHT
    elif _overlaps(b1, b2):
        breed = BREED_PARTIAL_WEIGHT
    else:
        breed = 0

    s1, s2 = normalize_size(t.size), normalize_size(c.size)
    size = SIZE_WEIGHT if s1 and s1 == s2 else 0

    c1, c2 = normalize_color(t.effective_color), normalize_color(c.effective_color)
    color = COLOR_WEIGHT if _overlaps(c1, c2) else 0

    candidate_features = [f.lower() for f in c.features]
    common = [f for f in t.features if any(_overlaps(f.lower(), other) for other in candidate_features)]
    features = FEATURE_WEIGHT if common else 0

    return MatchBreakdown(breed=breed, size=size, color=color, features=features, common_features=common)


def score(target: DescriptorLike, candidate: DescriptorLike) -> float:
    """Similarity in ``[0.0, 1.0]``; pure and deterministic."""
    return explain(target, candidate).score
