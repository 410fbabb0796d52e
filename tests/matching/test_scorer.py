from __future__ import annotations

import pytest

from analysis.models.domain import DogFeatureDescriptor, SightingAnalysis
from matching import explain, score
from matching.vocabulary import normalize_breed, normalize_color, normalize_size


def test_full_match_in_korean():
    target = {"breed": "푸들", "size": "소형", "color": "하얀색", "features": ["빨간 목줄"]}
    candidate = {"breed": "푸들", "size": "소형", "color": "하얀색", "features": ["빨간 목줄"]}
    assert score(target, candidate) == 1.0


def test_english_candidate_normalises_to_korean():
    target = DogFeatureDescriptor(breed="푸들", size="소형", color="하얀색")
    candidate = {"breed": "Poodle", "size": "small", "color": "white"}
    assert score(target, candidate) == pytest.approx(0.9)


def test_partial_breed_match():
    assert score({"breed": "Poodle"}, {"breed": "poodle mix"}) == pytest.approx(0.3)


def test_empty_descriptors_score_zero():
    assert score({}, {}) == 0.0
    assert score(DogFeatureDescriptor(), DogFeatureDescriptor(breed="푸들")) == 0.0


def test_score_is_symmetric_for_identical_vocabularies():
    a = {"breed": "진돗개", "color": "하얀색"}
    b = {"breed": "jindo", "color": "white"}
    assert score(a, b) == score(b, a) == pytest.approx(0.7)


def test_color_substring_and_primary_color():
    target = DogFeatureDescriptor(primary_color="갈색")
    candidate = SightingAnalysis(is_dog=True, color="갈색 얼룩")
    breakdown = explain(target, candidate)
    assert breakdown.color == 2
    assert breakdown.reasons() == ["색상 일치"]


def test_feature_overlap_counts_once():
    b = explain(
        {"features": ["빨간 목줄", "꼬리가 짧음"]},
        {"features": ["목줄", "짧음"]},
    )
    assert b.features == 1
    assert b.common_features == ["빨간 목줄", "꼬리가 짧음"]
    assert b.score == pytest.approx(0.1)


def test_score_is_bounded_and_deterministic():
    t = {"breed": "말티즈", "size": "소형", "color": "하얀색", "features": ["리본"]}
    c = {"breed": "maltese", "size": "소형견", "color": "white", "features": ["분홍 리본"]}
    first = score(t, c)
    assert first == score(t, c)
    assert 0.0 <= first <= 1.0
    assert first == 1.0


@pytest.mark.parametrize(
    "raw,expected",
    [("Small", "소형"), ("소형견", "소형"), ("  LARGE ", "대형"), ("중형", "중형"), ("", "")],
)
def test_normalize_size(raw, expected):
    assert normalize_size(raw) == expected


def test_normalize_breed_and_color_phrases():
    assert normalize_breed("Golden  Retriever") == "골든 리트리버"
    assert normalize_breed("mixed breed") == "믹스"
    assert normalize_breed("진도개") == "진돗개"
    assert normalize_color("black and white") == "검정색 and 하얀색"
    assert normalize_color(None) == ""
