"""File registry contract and the in-memory implementation."""

from __future__ import annotations

from typing import Iterable, Protocol, Sequence

from ..errors import FileNotFound
from ..models.domain import StoredFile


class FileRegistry(Protocol):
    """Resolves uploaded file identifiers to file metadata."""

    def find_many(self, ids: Sequence[str]) -> list[StoredFile]: ...


def order_files(ids: Sequence[str], found: Iterable[StoredFile]) -> list[StoredFile]:
    """Return files in the order of ``ids``, failing when any id is unknown."""

    by_id = {stored.uuid: stored for stored in found}
    missing = [file_id for file_id in ids if file_id not in by_id]
    if missing:
        raise FileNotFound(f"Unable to find uploaded file(s): {', '.join(missing)}")
    return [by_id[file_id] for file_id in ids]


class InMemoryFileRegistry:
    def __init__(self, files: Iterable[StoredFile] = ()) -> None:
        self._files = {stored.uuid: stored for stored in files}

    def register(self, stored: StoredFile) -> StoredFile:
        self._files[stored.uuid] = stored
        return stored

    def find_many(self, ids: Sequence[str]) -> list[StoredFile]:
        return order_files(ids, self._files.values())
