"""Spreadsheet/CSV export of place and vehicle selections."""

from __future__ import annotations

import csv
import io
import re
import unicodedata
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Sequence

from openpyxl import Workbook

from ...errors import UnsupportedFormat
from ...models.domain import EntityKind
from ...persistence.records import RecordStore

# Column heading -> record field. Headings match what the importer accepts.
PLACE_COLUMNS: list[tuple[str, str]] = [
    ("id", "public_id"),
    ("name", "name"),
    ("address", "address"),
    ("street1", "street1"),
    ("city", "city"),
    ("postal code", "postal_code"),
    ("country", "country"),
    ("phone", "phone"),
    ("latitude", "latitude"),
    ("longitude", "longitude"),
    ("created at", "created_at"),
]
VEHICLE_COLUMNS: list[tuple[str, str]] = PLACE_COLUMNS + [
    ("status", "status"),
    ("online", "online"),
]

MEDIA_TYPES = {
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "csv": "text/csv",
    "tsv": "text/tab-separated-values",
}


@dataclass(slots=True)
class ExportFile:
    filename: str
    content: bytes
    media_type: str


def slugify(value: str, separator: str = "-") -> str:
    """Drop everything but letters, digits, whitespace and separators, then join with ``separator``."""

    text = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    text = re.sub(rf"[^{re.escape(separator)}\w\s]+", "", text.lower())
    text = re.sub(rf"[{re.escape(separator)}_\s]+", separator, text)
    return text.strip(separator)


def export_filename(kind: EntityKind, fmt: str, now: Optional[datetime] = None) -> str:
    stamp = (now or datetime.now()).strftime("%Y-%m-%d-%H:%M")
    return f"{slugify(f'{kind.plural}-{stamp}')}.{fmt}"


def columns_for(kind: EntityKind) -> list[tuple[str, str]]:
    return VEHICLE_COLUMNS if kind is EntityKind.VEHICLE else PLACE_COLUMNS


def export_records(
    store: RecordStore,
    scope: str,
    selections: Sequence[str] = (),
    fmt: str = "xlsx",
    *,
    now: Optional[datetime] = None,
) -> ExportFile:
    """Render the selected records (every record when nothing is selected)."""

    fmt = (fmt or "xlsx").lower()
    if fmt not in MEDIA_TYPES:
        raise UnsupportedFormat(
            f"Unsupported export format '{fmt}', must be one of: {', '.join(MEDIA_TYPES)}"
        )

    records = store.find_by_ids(scope, selections) if selections else store.all(scope)
    columns = columns_for(store.kind)
    rows = [[_cell(record.get(field)) for _, field in columns] for record in records]
    headings = [heading for heading, _ in columns]

    if fmt == "xlsx":
        content = _to_xlsx(store.kind.plural, headings, rows)
    else:
        content = _to_delimited(headings, rows, "\t" if fmt == "tsv" else ",")
    return ExportFile(filename=export_filename(store.kind, fmt, now), content=content, media_type=MEDIA_TYPES[fmt])


def _cell(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return str(value)
    return value


def _to_xlsx(title: str, headings: list[str], rows: list[list[Any]]) -> bytes:
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = title[:31]
    worksheet.append(headings)
    for row in rows:
        worksheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def _to_delimited(headings: list[str], rows: list[list[Any]], delimiter: str) -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=delimiter)
    writer.writerow(headings)
    writer.writerows(["" if value is None else value for value in row] for row in rows)
    return buffer.getvalue().encode("utf-8")
