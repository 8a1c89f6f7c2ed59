"""Import orchestration: resolve files, decode, normalize and hand off."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Protocol, Sequence

from ...config import settings
from ...errors import DecodeError, FormatError, NotFound, UnsupportedFormat
from ...models.domain import EntityKind, ImportBatch, ImportSummary, StoredFile
from ...persistence.files import FileRegistry
from ...persistence.filesystem import FileStorage
from ...persistence.records import RecordStore
from ..normalization import normalize_row
from .reader import Sheet, SpreadsheetReader

logger = logging.getLogger(__name__)

IMPORT_COMPLETED = "Import completed"


class FileReader(Protocol):
    def parse(self, data: bytes, format_hint: str) -> list[Sheet]: ...


class ImportPipeline:
    """Runs one import call for a single entity kind.

    Any file-level failure (unknown id, disallowed extension, undecodable
    bytes) aborts the whole call; row-level issues only produce warnings.
    """

    def __init__(
        self,
        kind: EntityKind,
        registry: FileRegistry,
        store: RecordStore,
        *,
        reader: Optional[FileReader] = None,
        storage_for_disk: Callable[[Optional[str]], FileStorage] = FileStorage.for_disk,
        allowed_extensions: Optional[Sequence[str]] = None,
        persist: Optional[bool] = None,
    ) -> None:
        self.kind = kind
        self.registry = registry
        self.store = store
        self.reader = reader or SpreadsheetReader()
        self.storage_for_disk = storage_for_disk
        self.allowed_extensions = tuple(
            ext.lower().lstrip(".") for ext in (allowed_extensions or settings.allowed_import_extensions)
        )
        if persist is None:
            persist = kind.persists_on_import or settings.persist_place_imports
        self.persist = persist

    def run(self, file_ids: Sequence[str], scope: str, disk: Optional[str] = None) -> ImportSummary:
        batch = self.build_batch(file_ids, disk)
        if self.persist:
            self.store.bulk_insert(scope, batch.records)
        else:
            logger.info(f"Normalized {batch.count} {self.kind.plural} without persisting")
        return ImportSummary(status="ok", message=IMPORT_COMPLETED, count=batch.count)

    def build_batch(self, file_ids: Sequence[str], disk: Optional[str] = None) -> ImportBatch:
        files = self.registry.find_many(file_ids)

        collected: list[tuple[str, Any]] = []
        for stored in files:
            self.validate_extension(stored)
            sheets = self._decode(stored, disk)
            if len(sheets) != 1:
                logger.warning(
                    f"Skipping {stored.path}: expected a single sheet, found {len(sheets)}"
                )
                continue
            collected.extend((stored.uuid, row) for row in sheets[0])

        batch = ImportBatch(failed_rows={stored.uuid: 0 for stored in files})
        for index, (file_id, raw_row) in enumerate(collected, start=1):
            try:
                record, warnings = normalize_row(raw_row, self.kind)
            except FormatError as exc:
                batch.failed_rows[file_id] += 1
                batch.warnings.append(f"Row {index}: {exc.message}")
                logger.warning(f"Skipping row {index} of file {file_id}: {exc.message}")
                continue
            batch.records.append(record)
            batch.warnings.extend(f"Row {index}: {message}" for message in warnings)

        logger.info(
            f"Prepared {batch.count} {self.kind.plural} from {len(files)} file(s), "
            f"{sum(batch.failed_rows.values())} row(s) rejected, {len(batch.warnings)} warning(s)"
        )
        return batch

    def validate_extension(self, stored: StoredFile) -> None:
        if stored.extension not in self.allowed_extensions:
            raise UnsupportedFormat(
                "Invalid file uploaded, must be one of the following: " + ", ".join(self.allowed_extensions)
            )

    def _decode(self, stored: StoredFile, disk: Optional[str]) -> list[Sheet]:
        try:
            data = self.storage_for_disk(disk or stored.disk).read_bytes(stored.path)
            return self.reader.parse(data, stored.extension)
        except DecodeError:
            logger.error(f"Unable to decode {stored.path}")
            raise
        except NotFound:
            raise
        except Exception as exc:
            logger.error(f"Unable to read {stored.path}: {exc}")
            raise DecodeError(f"Invalid file, unable to process: {exc}") from exc


def run_import(
    file_ids: Sequence[str],
    kind: EntityKind,
    *,
    scope: str,
    registry: FileRegistry,
    store: RecordStore,
    disk: Optional[str] = None,
    reader: Optional[FileReader] = None,
) -> ImportSummary:
    """Convenience wrapper building an :class:`ImportPipeline` for one call."""

    pipeline = ImportPipeline(kind, registry, store, reader=reader)
    return pipeline.run(file_ids, scope, disk=disk)
