"""In-memory sighting store keyed by canonical post URL.

The store lives for the lifetime of the process; there is no persistence.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Set, Union

from ingestion.models.domain import AnalyzedSighting

SightingInput = Union[AnalyzedSighting, Mapping[str, Any]]


class SightingRepository(Protocol):
    def add(self, sighting: SightingInput) -> bool: ...  # noqa: D401
    def get(self, link: str) -> Optional[AnalyzedSighting]: ...  # noqa: D401
    def get_all(self) -> List[AnalyzedSighting]: ...  # noqa: D401


class InMemorySightingStore:
    """Upsert-merging sighting cache.

    - 신규 link: 그대로 저장하고 True 반환
    - 기존 link: 들어온 레코드에 실제로 지정된 필드만 기존 레코드 위에 덮어쓰고 False 반환
      (analysis는 객체 단위로 통째로 교체, 지정되지 않은 필드는 보존)

    반환값은 항상 복사본이므로 호출자가 수정해도 저장소 상태는 바뀌지 않는다.
    변경은 반드시 add()를 통해야 한다.
    """

    def __init__(self) -> None:
        self._records: Dict[str, AnalyzedSighting] = {}
        self._in_flight: Set[str] = set()
        self._lock = threading.Lock()

    @staticmethod
    def _coerce(sighting: SightingInput) -> AnalyzedSighting:
        if isinstance(sighting, AnalyzedSighting):
            return sighting
        return AnalyzedSighting.model_validate(dict(sighting))

    def add(self, sighting: SightingInput) -> bool:
        incoming = self._coerce(sighting).model_copy(deep=True)
        key = incoming.link
        with self._lock:
            existing = self._records.get(key)
            if existing is None:
                self._records[key] = incoming
                return True
            update = {name: getattr(incoming, name) for name in incoming.model_fields_set if name != "link"}
            self._records[key] = existing.model_copy(update=update)
            return False

    def get(self, link: str) -> Optional[AnalyzedSighting]:
        with self._lock:
            record = self._records.get(link.strip())
            return record.model_copy(deep=True) if record is not None else None

    def exists(self, link: str) -> bool:
        with self._lock:
            return link.strip() in self._records

    def get_all(self) -> List[AnalyzedSighting]:
        with self._lock:
            return [record.model_copy(deep=True) for record in self._records.values()]

    def pending(self) -> List[AnalyzedSighting]:
        """Records that have not been analysed yet."""
        with self._lock:
            return [r.model_copy(deep=True) for r in self._records.values() if r.analysis is None]

    def claim_pending(self) -> List[AnalyzedSighting]:
        """Pending records not already claimed; the returned links are marked in flight.

        Callers must hand the links back with :meth:`release` once done, whether
        or not the analysis succeeded.
        """
        with self._lock:
            claimed = [
                r for r in self._records.values() if r.analysis is None and r.link not in self._in_flight
            ]
            self._in_flight.update(r.link for r in claimed)
            return [r.model_copy(deep=True) for r in claimed]

    def release(self, links: Iterable[str]) -> None:
        with self._lock:
            self._in_flight.difference_update(links)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
