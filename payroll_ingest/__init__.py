"""Spreadsheet ingestion and field validation for personnel and compensation data."""

__version__ = "0.1.0"
