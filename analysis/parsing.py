"""Parsing of raw model text into validated analysis results."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import ValidationError

from analysis.models.domain import SightingAnalysis

logger = logging.getLogger(__name__)

_INDEX_RE = re.compile(r"-?[0-9]+")


@dataclass(frozen=True)
class ParseFailure:
    index: Optional[int]
    reason: str


ParsedItem = Union[SightingAnalysis, ParseFailure]


def extract_json_array(text: str) -> Optional[List[Any]]:
    """Return the JSON array spanning the first ``[`` to the last ``]``.

    ``None`` when the text holds no bracketed span. Malformed JSON inside the
    span raises ``json.JSONDecodeError``.
    """
    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end <= start:
        return None
    data = json.loads(text[start : end + 1])
    if not isinstance(data, list):
        return None
    return data


def extract_json_object(text: str) -> Optional[Dict[str, Any]]:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    data = json.loads(text[start : end + 1])
    return data if isinstance(data, dict) else None


def coerce_index(value: Any) -> Optional[int]:
    """Accept ints, integral floats and numeral strings; reject everything else."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        s = value.strip()
        # ASCII digits only
        if _INDEX_RE.fullmatch(s):
            return int(s)
    return None


def parse_item(raw: Any) -> Tuple[Optional[int], ParsedItem]:
    """Validate one array element; returns its coerced index and the outcome."""
    if not isinstance(raw, dict):
        return None, ParseFailure(None, "not an object")
    index = coerce_index(raw.get("index"))
    if index is None:
        return None, ParseFailure(None, f"invalid index: {raw.get('index')!r}")
    try:
        return index, SightingAnalysis.model_validate(raw)
    except ValidationError as exc:
        return index, ParseFailure(index, f"validation failed: {exc.error_count()} errors")
    except (TypeError, ValueError) as exc:
        return index, ParseFailure(index, f"unusable value: {exc}")


def parse_batch_response(text: str, size: int) -> Dict[int, SightingAnalysis]:
    """Map in-range indices to validated results; everything else is dropped."""
    data = extract_json_array(text)
    if data is None:
        logger.warning("batch.no_json_array", extra={"response_chars": len(text)})
        return {}

    results: Dict[int, SightingAnalysis] = {}
    for raw in data:
        index, parsed = parse_item(raw)
        if isinstance(parsed, ParseFailure):
            logger.info("batch.item_rejected", extra={"index": parsed.index, "reason": parsed.reason})
            continue
        if index is None or not 0 <= index < size:
            logger.info("batch.index_out_of_range", extra={"index": index, "size": size})
            continue
        results[index] = parsed
    return results
