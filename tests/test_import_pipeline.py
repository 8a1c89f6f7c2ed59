import io
from pathlib import Path

import pytest
from openpyxl import Workbook

from fleetops.errors import DecodeError, FileNotFound, UnsupportedFormat
from fleetops.models.domain import EntityKind, StoredFile
from fleetops.persistence.files import InMemoryFileRegistry
from fleetops.persistence.filesystem import FileStorage
from fleetops.persistence.records import InMemoryRecordStore
from fleetops.services.imports import IMPORT_COMPLETED, ImportPipeline

SCOPE = "company-1"


def _write(tmp_path: Path, registry: InMemoryFileRegistry, file_id: str, name: str, payload: bytes) -> None:
    FileStorage(root=tmp_path).write_bytes(name, payload)
    registry.register(StoredFile(uuid=file_id, path=name))


def _workbook_bytes(*sheets: list[list]) -> bytes:
    workbook = Workbook()
    workbook.remove(workbook.active)
    for index, rows in enumerate(sheets):
        worksheet = workbook.create_sheet(f"Sheet{index + 1}")
        for row in rows:
            worksheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def _pipeline(kind: EntityKind, registry, store, tmp_path: Path, **kwargs) -> ImportPipeline:
    return ImportPipeline(
        kind,
        registry,
        store,
        storage_for_disk=lambda disk: FileStorage(root=tmp_path),
        **kwargs,
    )


def test_vehicle_import_persists_rows_in_file_order(tmp_path: Path) -> None:
    registry = InMemoryFileRegistry()
    store = InMemoryRecordStore(EntityKind.VEHICLE)
    _write(tmp_path, registry, "f1", "first.csv", b"name,id\nTruck A,V1\nTruck B,V2\n")
    _write(tmp_path, registry, "f2", "second.xlsx", _workbook_bytes([["Name", "ID"], ["Truck C", "V3"]]))

    summary = _pipeline(EntityKind.VEHICLE, registry, store, tmp_path).run(["f2", "f1"], SCOPE)

    assert summary.status == "ok"
    assert summary.message == IMPORT_COMPLETED
    assert summary.count == 3
    stored = store.all(SCOPE)
    assert [record["name"] for record in stored] == ["Truck C", "Truck A", "Truck B"]
    assert [record["public_id"] for record in stored] == ["V3", "V1", "V2"]
    assert all(record["status"] == "active" and record["online"] is False for record in stored)
    assert all(record["company_uuid"] == SCOPE and record["uuid"] for record in stored)


def test_place_import_counts_rows_without_persisting(tmp_path: Path) -> None:
    registry = InMemoryFileRegistry()
    store = InMemoryRecordStore(EntityKind.PLACE)
    _write(tmp_path, registry, "f1", "places.csv", b"name,country\nDepot,Germany\nAnnex,France\n")

    summary = _pipeline(EntityKind.PLACE, registry, store, tmp_path).run(["f1"], SCOPE)

    assert summary.count == 2
    assert store.all(SCOPE) == []


def test_place_import_persists_when_enabled(tmp_path: Path) -> None:
    registry = InMemoryFileRegistry()
    store = InMemoryRecordStore(EntityKind.PLACE)
    _write(tmp_path, registry, "f1", "places.csv", b"name,country\nDepot,Germany\n")

    _pipeline(EntityKind.PLACE, registry, store, tmp_path, persist=True).run(["f1"], SCOPE)

    assert [record["country"] for record in store.all(SCOPE)] == ["DE"]


def test_disallowed_extension_aborts_whole_import(tmp_path: Path) -> None:
    registry = InMemoryFileRegistry()
    store = InMemoryRecordStore(EntityKind.VEHICLE)
    _write(tmp_path, registry, "good", "good.csv", b"name\nTruck\n")
    _write(tmp_path, registry, "bad", "notes.pdf", b"%PDF-1.4")

    with pytest.raises(UnsupportedFormat) as excinfo:
        _pipeline(EntityKind.VEHICLE, registry, store, tmp_path).run(["good", "bad"], SCOPE)

    assert excinfo.value.message == (
        "Invalid file uploaded, must be one of the following: csv, tsv, xls, xlsx"
    )
    assert store.all(SCOPE) == []


def test_unknown_file_id_raises_file_not_found(tmp_path: Path) -> None:
    registry = InMemoryFileRegistry()
    store = InMemoryRecordStore(EntityKind.VEHICLE)
    _write(tmp_path, registry, "f1", "vehicles.csv", b"name\nTruck\n")

    with pytest.raises(FileNotFound) as excinfo:
        _pipeline(EntityKind.VEHICLE, registry, store, tmp_path).run(["f1", "missing"], SCOPE)

    assert "missing" in excinfo.value.message
    assert store.all(SCOPE) == []


def test_undecodable_file_raises_decode_error(tmp_path: Path) -> None:
    registry = InMemoryFileRegistry()
    store = InMemoryRecordStore(EntityKind.VEHICLE)
    _write(tmp_path, registry, "f1", "broken.xlsx", b"not a workbook")

    with pytest.raises(DecodeError):
        _pipeline(EntityKind.VEHICLE, registry, store, tmp_path).run(["f1"], SCOPE)


def test_registered_file_missing_on_disk_raises_decode_error(tmp_path: Path) -> None:
    registry = InMemoryFileRegistry([StoredFile(uuid="f1", path="gone.csv")])
    store = InMemoryRecordStore(EntityKind.VEHICLE)

    with pytest.raises(DecodeError):
        _pipeline(EntityKind.VEHICLE, registry, store, tmp_path).run(["f1"], SCOPE)


def test_multi_sheet_workbooks_are_skipped(tmp_path: Path) -> None:
    registry = InMemoryFileRegistry()
    store = InMemoryRecordStore(EntityKind.VEHICLE)
    _write(
        tmp_path,
        registry,
        "multi",
        "multi.xlsx",
        _workbook_bytes([["name"], ["Skipped 1"]], [["name"], ["Skipped 2"]]),
    )
    _write(tmp_path, registry, "single", "single.csv", b"name\nKept\n")

    summary = _pipeline(EntityKind.VEHICLE, registry, store, tmp_path).run(["multi", "single"], SCOPE)

    assert summary.count == 1
    assert [record["name"] for record in store.all(SCOPE)] == ["Kept"]


def test_non_mapping_rows_are_counted_and_skipped(tmp_path: Path) -> None:
    class ListRowReader:
        def parse(self, data: bytes, format_hint: str):
            return [[{"name": "Good"}, ["not", "a", "mapping"]]]

    registry = InMemoryFileRegistry()
    store = InMemoryRecordStore(EntityKind.PLACE)
    _write(tmp_path, registry, "f1", "rows.csv", b"ignored")

    batch = _pipeline(EntityKind.PLACE, registry, store, tmp_path, reader=ListRowReader()).build_batch(["f1"])

    assert batch.count == 1
    assert batch.failed_rows == {"f1": 1}
    assert batch.warnings and batch.warnings[0].startswith("Row 2:")


def test_request_disk_overrides_stored_disk(tmp_path: Path) -> None:
    requested: list = []

    def storage_for_disk(disk):
        requested.append(disk)
        return FileStorage(root=tmp_path)

    registry = InMemoryFileRegistry()
    FileStorage(root=tmp_path).write_bytes("v.csv", b"name\nTruck\n")
    registry.register(StoredFile(uuid="f1", path="v.csv", disk="s3"))
    registry.register(StoredFile(uuid="f2", path="v.csv", disk="s3"))
    store = InMemoryRecordStore(EntityKind.VEHICLE)
    pipeline = ImportPipeline(EntityKind.VEHICLE, registry, store, storage_for_disk=storage_for_disk)

    pipeline.run(["f1"], SCOPE, disk="local")
    pipeline.run(["f2"], SCOPE)

    assert requested == ["local", "s3"]
