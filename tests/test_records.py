import csv
import io
from datetime import datetime

import pytest
from openpyxl import load_workbook

from fleetops.errors import EmptyInput, NotDeleted, UnsupportedFormat
from fleetops.models.domain import EntityKind
from fleetops.persistence.records import InMemoryRecordStore
from fleetops.services.export import export_filename, export_records, slugify
from fleetops.services.records import bulk_delete, list_statuses

SCOPE = "company-1"
NOW = datetime(2026, 10, 19, 14, 30)


def _places() -> InMemoryRecordStore:
    return InMemoryRecordStore(
        EntityKind.PLACE,
        [
            {"uuid": "p1", "company_uuid": SCOPE, "public_id": "P-1", "name": "Depot", "country": "DE", "latitude": 52.5},
            {"uuid": "p2", "company_uuid": SCOPE, "public_id": "P-2", "name": "Annex", "country": "FR"},
            {"uuid": "p3", "company_uuid": "company-2", "name": "Elsewhere"},
        ],
    )


class InertStore(InMemoryRecordStore):
    """Finds records but reports that nothing was deleted."""

    def delete_by_ids(self, scope, ids):
        return 0


def test_bulk_delete_requires_ids() -> None:
    store = _places()

    with pytest.raises(EmptyInput) as excinfo:
        bulk_delete(store, SCOPE, [])

    assert excinfo.value.message == "Nothing to delete."
    assert len(store.all(SCOPE)) == 2


def test_bulk_delete_returns_matching_count() -> None:
    store = _places()

    assert bulk_delete(store, SCOPE, ["p1", "p3", "unknown"]) == 1
    assert [record["uuid"] for record in store.all(SCOPE)] == ["p2"]
    assert len(store.all("company-2")) == 1


def test_bulk_delete_with_no_matches_is_not_an_error() -> None:
    assert bulk_delete(_places(), SCOPE, ["unknown"]) == 0


def test_bulk_delete_without_effect_raises_not_deleted() -> None:
    store = InertStore(EntityKind.VEHICLE, [{"uuid": "v1", "company_uuid": SCOPE, "name": "Truck"}])

    with pytest.raises(NotDeleted) as excinfo:
        bulk_delete(store, SCOPE, ["v1"])

    assert excinfo.value.message == "Failed to bulk delete vehicles."


def test_list_statuses_is_distinct_per_company() -> None:
    store = InMemoryRecordStore(
        EntityKind.VEHICLE,
        [
            {"uuid": "v1", "company_uuid": SCOPE, "status": "active"},
            {"uuid": "v2", "company_uuid": SCOPE, "status": "maintenance"},
            {"uuid": "v3", "company_uuid": SCOPE, "status": "active"},
            {"uuid": "v4", "company_uuid": "company-2", "status": "retired"},
        ],
    )

    assert list_statuses(store, SCOPE) == ["active", "maintenance"]


def test_slugify_and_export_filename() -> None:
    assert slugify("places-2026-10-19-14:30") == "places-2026-10-19-1430"
    assert slugify("  Héllo   Wörld ") == "hello-world"
    assert export_filename(EntityKind.VEHICLE, "csv", NOW) == "vehicles-2026-10-19-1430.csv"


def test_export_xlsx_uses_import_headings() -> None:
    exported = export_records(_places(), SCOPE, fmt="xlsx", now=NOW)

    assert exported.filename == "places-2026-10-19-1430.xlsx"
    workbook = load_workbook(io.BytesIO(exported.content))
    rows = list(workbook.active.iter_rows(values_only=True))
    assert rows[0][:3] == ("id", "name", "address")
    assert "created at" in rows[0]
    assert [row[1] for row in rows[1:]] == ["Depot", "Annex"]


def test_export_csv_limits_to_selection() -> None:
    exported = export_records(_places(), SCOPE, ["p2"], "csv", now=NOW)

    assert exported.media_type == "text/csv"
    rows = list(csv.DictReader(io.StringIO(exported.content.decode("utf-8"))))
    assert len(rows) == 1
    assert rows[0]["id"] == "P-2"
    assert rows[0]["country"] == "FR"
    assert rows[0]["latitude"] == ""


def test_export_vehicle_tsv_includes_status_columns() -> None:
    store = InMemoryRecordStore(
        EntityKind.VEHICLE,
        [{"uuid": "v1", "company_uuid": SCOPE, "name": "Truck", "status": "active", "online": False}],
    )

    exported = export_records(store, SCOPE, fmt="tsv", now=NOW)

    header, row = exported.content.decode("utf-8").splitlines()
    assert header.split("\t")[-2:] == ["status", "online"]
    assert row.split("\t")[-2:] == ["active", "False"]


def test_export_rejects_unknown_format() -> None:
    with pytest.raises(UnsupportedFormat):
        export_records(_places(), SCOPE, fmt="pdf")
