"""Record maintenance operations shared by places and vehicles."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from ..errors import EmptyInput, NotDeleted
from ..persistence.records import RecordStore

logger = logging.getLogger(__name__)


def bulk_delete(store: RecordStore, scope: str, ids: Sequence[str]) -> int:
    """Soft-delete records by uuid and return how many matched.

    Raises:
        EmptyInput: If ``ids`` is empty; the store is not touched.
        NotDeleted: If records matched but the store deleted none of them.
    """

    if not ids:
        raise EmptyInput("Nothing to delete.")

    count = len(store.find_by_ids(scope, ids))
    deleted = store.delete_by_ids(scope, ids)
    if count and not deleted:
        logger.error(f"Store deleted none of {count} matching {store.kind.plural} for company {scope}")
        raise NotDeleted(f"Failed to bulk delete {store.kind.plural}.")
    return count


def list_statuses(store: RecordStore, scope: str) -> list[Any]:
    return store.distinct_values(scope, "status")
