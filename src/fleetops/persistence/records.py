"""Record store contract and the in-memory implementation."""

from __future__ import annotations

import copy
import logging
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, Optional, Protocol, Sequence

from ..models.domain import EntityKind
from ..services.geospatial import record_distance_km

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("name", "address", "public_id")


class Ordering(str, Enum):
    NAME_DESC = "name_desc"
    DISTANCE_ASC = "distance_asc"


class RecordStore(Protocol):
    """Company-scoped storage of place or vehicle records."""

    kind: EntityKind

    def search(
        self,
        scope: str,
        text: Optional[str],
        *,
        ordering: Ordering,
        near: Optional[tuple[float, float]] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]: ...

    def find_by_ids(self, scope: str, ids: Sequence[str]) -> list[dict[str, Any]]: ...

    def delete_by_ids(self, scope: str, ids: Sequence[str]) -> int: ...

    def bulk_insert(self, scope: str, records: Sequence[dict[str, Any]]) -> int: ...

    def distinct_values(self, scope: str, field: str) -> list[Any]: ...

    def all(self, scope: str) -> list[dict[str, Any]]: ...


def prepare_for_insert(scope: str, record: dict[str, Any]) -> dict[str, Any]:
    """Attach storage-owned fields to a normalized record."""

    prepared = dict(record)
    prepared["uuid"] = str(uuid.uuid4())
    prepared["company_uuid"] = scope
    prepared.setdefault("created_at", datetime.now(timezone.utc).isoformat())
    prepared["deleted_at"] = None
    return prepared


def matches_text(record: dict[str, Any], text: Optional[str]) -> bool:
    if not text or not text.strip():
        return True
    needle = text.strip().lower()
    return any(needle in str(record.get(field) or "").lower() for field in SEARCH_FIELDS)


def order_records(
    records: Iterable[dict[str, Any]],
    ordering: Ordering,
    near: Optional[tuple[float, float]] = None,
) -> list[dict[str, Any]]:
    """Sort records by name (descending) or by distance from ``near`` (ascending).

    Records without coordinates sort after every located record.
    """

    items = list(records)
    if ordering is Ordering.DISTANCE_ASC:
        if near is None:
            raise ValueError("Distance ordering requires a reference point.")

        def distance_key(record: dict[str, Any]) -> tuple[int, float]:
            distance = record_distance_km(record, near)
            return (1, 0.0) if distance is None else (0, distance)

        return sorted(items, key=distance_key)
    return sorted(items, key=lambda record: str(record.get("name") or "").casefold(), reverse=True)


def apply_limit(records: list[dict[str, Any]], limit: Optional[int]) -> list[dict[str, Any]]:
    if not limit:
        return records
    return records[:limit]


class InMemoryRecordStore:
    """Process-local store used when no database is configured, and in tests."""

    def __init__(self, kind: EntityKind, records: Iterable[dict[str, Any]] = ()) -> None:
        self.kind = kind
        self._records: list[dict[str, Any]] = [dict(record) for record in records]

    def _live(self, scope: str) -> list[dict[str, Any]]:
        return [
            record
            for record in self._records
            if record.get("company_uuid") == scope and record.get("deleted_at") is None
        ]

    def search(
        self,
        scope: str,
        text: Optional[str],
        *,
        ordering: Ordering,
        near: Optional[tuple[float, float]] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        matched = [record for record in self._live(scope) if matches_text(record, text)]
        ordered = order_records(matched, ordering, near)
        return copy.deepcopy(apply_limit(ordered, limit))

    def find_by_ids(self, scope: str, ids: Sequence[str]) -> list[dict[str, Any]]:
        wanted = set(ids)
        return copy.deepcopy([record for record in self._live(scope) if record.get("uuid") in wanted])

    def delete_by_ids(self, scope: str, ids: Sequence[str]) -> int:
        wanted = set(ids)
        deleted_at = datetime.now(timezone.utc).isoformat()
        count = 0
        for record in self._live(scope):
            if record.get("uuid") in wanted:
                record["deleted_at"] = deleted_at
                count += 1
        logger.info(f"Soft-deleted {count} {self.kind.plural} for company {scope}")
        return count

    def bulk_insert(self, scope: str, records: Sequence[dict[str, Any]]) -> int:
        prepared = [prepare_for_insert(scope, record) for record in records]
        self._records.extend(prepared)
        logger.info(f"Inserted {len(prepared)} {self.kind.plural} for company {scope}")
        return len(prepared)

    def distinct_values(self, scope: str, field: str) -> list[Any]:
        seen: list[Any] = []
        for record in self._live(scope):
            value = record.get(field)
            if value not in (None, "") and value not in seen:
                seen.append(value)
        return seen

    def all(self, scope: str) -> list[dict[str, Any]]:
        return copy.deepcopy(self._live(scope))
