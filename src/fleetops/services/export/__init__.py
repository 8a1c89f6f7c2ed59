"""Spreadsheet export helpers."""

from .spreadsheet import ExportFile, export_filename, export_records, slugify

__all__ = ["ExportFile", "export_filename", "export_records", "slugify"]
