"""Decode CSV/TSV/Excel bytes into sheets of heading-keyed rows."""

from __future__ import annotations

import csv
import io
import logging
from typing import Any, Iterable, Sequence

from openpyxl import load_workbook

from ...errors import DecodeError
from ..normalization import normalize_heading

logger = logging.getLogger(__name__)

Row = dict[str, Any]
Sheet = list[Row]

_DELIMITERS = {"csv": ",", "tsv": "\t"}
_WORKBOOK_FORMATS = {"xlsx", "xls"}


class SpreadsheetReader:
    """Default file reader used by the import pipeline."""

    def parse(self, data: bytes, format_hint: str) -> list[Sheet]:
        fmt = (format_hint or "").lower().lstrip(".")
        try:
            if fmt in _DELIMITERS:
                return [self._parse_delimited(data, _DELIMITERS[fmt])]
            if fmt in _WORKBOOK_FORMATS:
                return self._parse_workbook(data)
        except DecodeError:
            raise
        except Exception as exc:
            logger.warning(f"Unable to decode {fmt} file: {exc}")
            raise DecodeError(f"Invalid file, unable to process: {exc}") from exc
        raise DecodeError(f"No reader available for format '{format_hint}'")

    def _parse_delimited(self, data: bytes, delimiter: str) -> Sheet:
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"Invalid file, unable to process: {exc}") from exc

        reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)
        return _rows_from_table(reader)

    def _parse_workbook(self, data: bytes) -> list[Sheet]:
        workbook = load_workbook(filename=io.BytesIO(data), read_only=True, data_only=True)
        try:
            return [
                _rows_from_table(worksheet.iter_rows(values_only=True))
                for worksheet in workbook.worksheets
            ]
        finally:
            workbook.close()


def _rows_from_table(table: Iterable[Sequence[Any]]) -> Sheet:
    iterator = iter(table)
    header = next(iterator, None)
    if header is None:
        return []
    headings = [normalize_heading(cell) for cell in header]

    rows: Sheet = []
    for values in iterator:
        if all(_is_blank(cell) for cell in values):
            continue
        row: Row = {}
        for heading, cell in zip(headings, values):
            if not heading:
                continue
            row[heading] = None if _is_blank(cell) else cell
        rows.append(row)
    return rows


def _is_blank(cell: Any) -> bool:
    return cell is None or (isinstance(cell, str) and not cell.strip())
