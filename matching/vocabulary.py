"""Synonym/translation tables used to normalise dog descriptors.

Tables map English and variant Korean spellings onto one Korean canonical
form. Only that direction is defined.
"""

from __future__ import annotations

import re
from typing import Dict, Mapping, Optional, Pattern

SIZE_TABLE: Dict[str, str] = {
    "small": "소형",
    "s": "소형",
    "소형견": "소형",
    "작은": "소형",
    "medium": "중형",
    "mid": "중형",
    "m": "중형",
    "중형견": "중형",
    "large": "대형",
    "big": "대형",
    "l": "대형",
    "대형견": "대형",
    "큰": "대형",
}

BREED_TABLE: Dict[str, str] = {
    "golden retriever": "골든 리트리버",
    "골든리트리버": "골든 리트리버",
    "labrador retriever": "래브라도 리트리버",
    "labrador": "래브라도 리트리버",
    "라브라도": "래브라도 리트리버",
    "jindo": "진돗개",
    "진도개": "진돗개",
    "poodle": "푸들",
    "maltese": "말티즈",
    "말티스": "말티즈",
    "shih tzu": "시츄",
    "시추": "시츄",
    "pomeranian": "포메라니안",
    "chihuahua": "치와와",
    "bichon frise": "비숑",
    "bichon": "비숑",
    "비숑 프리제": "비숑",
    "welsh corgi": "웰시코기",
    "corgi": "웰시코기",
    "shiba inu": "시바견",
    "shiba": "시바견",
    "시바이누": "시바견",
    "dachshund": "닥스훈트",
    "beagle": "비글",
    "yorkshire terrier": "요크셔테리어",
    "yorkie": "요크셔테리어",
    "schnauzer": "슈나우저",
    "mixed breed": "믹스",
    "mixed": "믹스",
    "mix": "믹스",
    "믹스견": "믹스",
    "잡종": "믹스",
}

COLOR_TABLE: Dict[str, str] = {
    "white": "하얀색",
    "흰색": "하얀색",
    "흰": "하얀",
    "black": "검정색",
    "검은색": "검정색",
    "까만색": "검정색",
    "brown": "갈색",
    "tan": "갈색",
    "밤색": "갈색",
    "cream": "크림색",
    "beige": "베이지색",
    "gold": "황금색",
    "golden": "황금색",
    "금색": "황금색",
    "yellow": "노란색",
    "누런색": "노란색",
    "gray": "회색",
    "grey": "회색",
    "잿빛": "회색",
    "red": "빨간색",
    "붉은색": "빨간색",
}

_WS_RE = re.compile(r"\s+")


def _compile(table: Mapping[str, str]) -> Pattern[str]:
    alternatives = []
    for key in sorted(table, key=len, reverse=True):
        escaped = re.escape(key)
        alternatives.append(rf"\b{escaped}\b" if key.isascii() else escaped)
    return re.compile("|".join(alternatives))


_BREED_RE = _compile(BREED_TABLE)
_COLOR_RE = _compile(COLOR_TABLE)


def _basic(value: Optional[str]) -> str:
    return _WS_RE.sub(" ", (value or "").strip().lower())


def _replace_phrases(value: str, table: Mapping[str, str], pattern: Pattern[str]) -> str:
    if value in table:
        return table[value]
    return _WS_RE.sub(" ", pattern.sub(lambda m: table[m.group(0)], value)).strip()


def normalize_size(value: Optional[str]) -> str:
    v = _basic(value)
    return SIZE_TABLE.get(v, v)


def normalize_breed(value: Optional[str]) -> str:
    return _replace_phrases(_basic(value), BREED_TABLE, _BREED_RE)


def normalize_color(value: Optional[str]) -> str:
    return _replace_phrases(_basic(value), COLOR_TABLE, _COLOR_RE)
