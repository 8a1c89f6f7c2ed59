"""Spreadsheet import pipeline."""

from .pipeline import IMPORT_COMPLETED, ImportPipeline, run_import
from .reader import SpreadsheetReader, normalize_heading

__all__ = [
    "IMPORT_COMPLETED",
    "ImportPipeline",
    "SpreadsheetReader",
    "normalize_heading",
    "run_import",
]
