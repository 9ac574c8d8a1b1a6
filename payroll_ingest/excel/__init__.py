"""Spreadsheet decoding, header detection and cell coercion."""

from .cells import normalize_date, normalize_period, parse_bool
from .header import detect_header_row
from .reader import GridReadError, assemble_records, normalize_grid, read_grid, write_grid

__all__ = [
    "GridReadError",
    "read_grid",
    "write_grid",
    "detect_header_row",
    "normalize_grid",
    "assemble_records",
    "normalize_date",
    "normalize_period",
    "parse_bool",
]
