"""File-based storage helpers for uploaded import files."""

from __future__ import annotations

from pathlib import Path

from ..config import settings
from ..errors import NotFound


class FileStorage:
    """Thin wrapper around one storage disk root for reading and writing files."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = (root or settings.disks[settings.default_disk]).resolve()

    @classmethod
    def for_disk(cls, disk: str | None = None) -> "FileStorage":
        name = disk or settings.default_disk
        root = settings.disks.get(name)
        if root is None:
            raise NotFound(f"Unknown storage disk '{name}'")
        return cls(root=root)

    def resolve(self, relative_path: str) -> Path:
        path = (self.root / relative_path.lstrip("/")).resolve()
        if self.root not in path.parents and path != self.root:
            raise NotFound(f"Path '{relative_path}' is outside of the storage disk")
        return path

    def read_bytes(self, relative_path: str) -> bytes:
        path = self.resolve(relative_path)
        with path.open("rb") as handle:
            return handle.read()

    def write_bytes(self, relative_path: str, payload: bytes) -> Path:
        path = self.resolve(relative_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("wb") as handle:
            handle.write(payload)
        return path
