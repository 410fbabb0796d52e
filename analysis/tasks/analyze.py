"""Analysis stage: run pending sightings through the batch analyzer."""

from __future__ import annotations

import asyncio
import uuid
from typing import List, Optional, Sequence

from analysis.models.domain import DogFeatureDescriptor
from analysis.services.batch_analyzer import BatchAnalyzer
from ingestion.models.domain import AnalyzedSighting
from ingestion.services.sighting_store import InMemorySightingStore
from ingestion.utils.logging import get_logger
from matching.scorer import score


def _chunk(records: Sequence[AnalyzedSighting], size: int) -> List[List[AnalyzedSighting]]:
    return [list(records[i : i + size]) for i in range(0, len(records), size)]


async def _analyze_one_batch(
    store: InMemorySightingStore,
    analyzer: BatchAnalyzer,
    batch: List[AnalyzedSighting],
    profile: Optional[DogFeatureDescriptor],
) -> int:
    results = await analyzer.analyze([r.to_batch_item() for r in batch], profile)
    analysed = 0
    for record, result in zip(batch, results):
        if result is None:
            continue
        update = {"link": record.link, "analysis": result}
        if profile is not None:
            update["match_score"] = score(profile, result)
        store.add(update)
        analysed += 1
    return analysed


async def analyze_pending(
    store: InMemorySightingStore,
    analyzer: BatchAnalyzer,
    profile: Optional[DogFeatureDescriptor] = None,
    *,
    batch_size: int = 5,
) -> int:
    """Analyse every stored sighting that has no analysis yet.

    Returns the number of sightings that received an analysis. Sightings whose
    batch failed stay pending so the next call retries only those. Records
    claimed by an overlapping call are skipped, so concurrent calls never send
    the same post to the model twice.

    An unexpected exception from one batch does not discard the results of the
    others; it is re-raised after every batch has finished.
    """
    if batch_size <= 0:
        raise ValueError("batch_size는 1 이상이어야 합니다.")
    logger = get_logger(__name__)
    trace_id = str(uuid.uuid4())
    pending = store.claim_pending()
    if not pending:
        logger.info("analyze.no_pending", extra={"trace_id": trace_id})
        return 0

    try:
        batches = _chunk(pending, batch_size)
        logger.info(
            "analyze.start",
            extra={"trace_id": trace_id, "pending": len(pending), "batches": len(batches)},
        )
        outcomes = await asyncio.gather(
            *(_analyze_one_batch(store, analyzer, b, profile) for b in batches),
            return_exceptions=True,
        )
    finally:
        store.release(r.link for r in pending)

    analysed = 0
    failures: List[BaseException] = []
    for batch, outcome in zip(batches, outcomes):
        if isinstance(outcome, BaseException):
            logger.error(
                "analyze.batch_failed",
                extra={"trace_id": trace_id, "items": len(batch), "error": repr(outcome)},
            )
            failures.append(outcome)
        else:
            analysed += outcome
    logger.info(
        "analyze.saved",
        extra={
            "trace_id": trace_id,
            "analysed": analysed,
            "still_pending": len(pending) - analysed,
            "failed_batches": len(failures),
        },
    )
    if failures:
        raise failures[0]
    return analysed


def rescore_all(store: InMemorySightingStore, profile: DogFeatureDescriptor) -> int:
    """Recompute ``match_score`` of every analysed sighting for ``profile``."""
    updated = 0
    for record in store.get_all():
        if record.analysis is None:
            continue
        store.add({"link": record.link, "match_score": score(profile, record.analysis)})
        updated += 1
    get_logger(__name__).info("analyze.rescored", extra={"updated": updated})
    return updated
