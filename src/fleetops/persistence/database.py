"""Supabase-backed record store and file registry."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from supabase import Client

from ..models.domain import EntityKind, StoredFile
from .files import order_files
from .records import SEARCH_FIELDS, Ordering, apply_limit, order_records, prepare_for_insert

logger = logging.getLogger(__name__)

BATCH_SIZE = 100
FILES_TABLE = "files"


def text_filter(text: str) -> str:
    """PostgREST ``or`` filter matching ``text`` as a substring of any search field.

    Values are double-quoted so commas, parentheses and dots in the text stay
    literal; backslashes and quotes inside are escaped.
    """

    value = text.strip().replace("\\", "\\\\").replace('"', '\\"')
    return ",".join(f'{field}.ilike."%{value}%"' for field in SEARCH_FIELDS)


class SupabaseRecordStore:
    """Stores places or vehicles in the table named after the entity kind."""

    def __init__(self, client: Client, kind: EntityKind) -> None:
        self.client = client
        self.kind = kind

    def _scoped(self, scope: str, columns: str = "*"):
        return (
            self.client.table(self.kind.table)
            .select(columns)
            .eq("company_uuid", scope)
            .is_("deleted_at", "null")
        )

    def search(
        self,
        scope: str,
        text: Optional[str],
        *,
        ordering: Ordering,
        near: Optional[tuple[float, float]] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        query = self._scoped(scope)
        if text and text.strip():
            query = query.or_(text_filter(text))

        if ordering is Ordering.DISTANCE_ASC:
            # No spatial index available through the REST API; sort before truncating.
            rows = query.execute().data or []
            return apply_limit(order_records(rows, ordering, near), limit)

        query = query.order("name", desc=True)
        if limit:
            query = query.limit(limit)
        return query.execute().data or []

    def find_by_ids(self, scope: str, ids: Sequence[str]) -> list[dict[str, Any]]:
        if not ids:
            return []
        response = self._scoped(scope).in_("uuid", list(ids)).execute()
        return response.data or []

    def delete_by_ids(self, scope: str, ids: Sequence[str]) -> int:
        if not ids:
            return 0
        deleted_at = datetime.now(timezone.utc).isoformat()
        response = (
            self.client.table(self.kind.table)
            .update({"deleted_at": deleted_at})
            .eq("company_uuid", scope)
            .is_("deleted_at", "null")
            .in_("uuid", list(ids))
            .execute()
        )
        count = len(response.data or [])
        logger.info(f"Soft-deleted {count} {self.kind.plural} for company {scope}")
        return count

    def bulk_insert(self, scope: str, records: Sequence[dict[str, Any]]) -> int:
        prepared = [prepare_for_insert(scope, record) for record in records]
        inserted = 0
        for start in range(0, len(prepared), BATCH_SIZE):
            batch = prepared[start:start + BATCH_SIZE]
            self.client.table(self.kind.table).insert(batch).execute()
            inserted += len(batch)
            logger.debug(f"Inserted batch {start // BATCH_SIZE + 1} ({len(batch)} {self.kind.plural})")
        logger.info(f"Inserted {inserted} {self.kind.plural} for company {scope}")
        return inserted

    def distinct_values(self, scope: str, field: str) -> list[Any]:
        rows = self._scoped(scope, field).execute().data or []
        seen: list[Any] = []
        for row in rows:
            value = row.get(field)
            if value not in (None, "") and value not in seen:
                seen.append(value)
        return seen

    def all(self, scope: str) -> list[dict[str, Any]]:
        return self._scoped(scope).execute().data or []


class SupabaseFileRegistry:
    """Reads upload metadata from the ``files`` table."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def find_many(self, ids: Sequence[str]) -> list[StoredFile]:
        rows = []
        if ids:
            response = (
                self.client.table(FILES_TABLE)
                .select("uuid,path,disk,original_filename")
                .in_("uuid", list(ids))
                .is_("deleted_at", "null")
                .execute()
            )
            rows = response.data or []
        found = [
            StoredFile(
                uuid=str(row["uuid"]),
                path=str(row["path"]),
                disk=row.get("disk"),
                original_filename=row.get("original_filename"),
            )
            for row in rows
        ]
        return order_files(ids, found)
