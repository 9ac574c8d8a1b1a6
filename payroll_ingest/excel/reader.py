from __future__ import annotations

import io
import logging
import zipfile
from collections.abc import Collection, Sequence
from pathlib import Path
from typing import Any, BinaryIO

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

from ..models.sheet import ParsedSheet
from .cells import clean_cell, is_blank_cell, normalize_date
from .header import DEFAULT_SCAN_LIMIT, detect_header_row

"""Spreadsheet decoding, grid normalization and record assembly.

Flow:
1. read_grid(): decode the first sheet into a raw ragged grid (list of rows)
2. normalize_grid(): find the header row, drop rows above it and blank rows,
   optionally pad/truncate, convert date cells to YYYY-MM-DD
3. assemble_records(): zip header names with row cells into dicts

Structural problems (empty grid, nothing below the header) never raise here;
they surface as an empty ParsedSheet / record list.
"""

__all__ = [
    "GridReadError",
    "read_grid",
    "write_grid",
    "pad_row",
    "normalize_grid",
    "assemble_records",
    "assemble_numbered",
]

logger = logging.getLogger(__name__)

Grid = list[list[Any]]


class GridReadError(Exception):
    """Raised when a file cannot be decoded as a spreadsheet."""


def read_grid(source: Path | bytes | BinaryIO, sheet_name: str | int = 0) -> Grid:
    """Decode a spreadsheet into a raw grid of untyped cells.

    Parameters
    ----------
    source: file path, raw bytes or binary file object
    sheet_name: sheet to read (default: first sheet)

    Text such as "NA" or "null" is kept as text (keep_default_na=False); only
    truly empty cells come back as blanks.
    """
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)
    try:
        df = pd.read_excel(source, sheet_name=sheet_name, header=None, keep_default_na=False)
    except (OSError, ValueError, KeyError, zipfile.BadZipFile, InvalidFileException) as e:
        raise GridReadError(f"cannot read spreadsheet: {e}") from e

    grid: Grid = []
    for raw in df.astype(object).itertuples(index=False, name=None):
        row = [clean_cell(v) for v in raw]
        # pandas pads to a rectangle; trim the trailing padding back off
        while row and is_blank_cell(row[-1]):
            row.pop()
        grid.append(row)
    logger.debug("read_grid rows=%d", len(grid))
    return grid


def write_grid(headers: Sequence[str], rows: Sequence[Sequence[Any]], sheet_name: str = "Data") -> bytes:
    """Encode headers + rows as an xlsx workbook with a single sheet."""
    width = len(headers)
    df = pd.DataFrame([pad_row(width, r) for r in rows], columns=list(headers))
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=sheet_name, index=False)
    return buf.getvalue()


def pad_row(width: int, row: Sequence[Any] | None) -> list[Any]:
    """Right-pad with "" or truncate a row to exactly `width` cells."""
    if row is None:
        return [""] * width
    cells = list(row[:width])
    cells.extend([""] * (width - len(cells)))
    return cells


def _convert_row(row: Sequence[Any], headers: Sequence[str], date_columns: Collection[str]) -> list[Any]:
    out: list[Any] = []
    for idx, value in enumerate(row):
        value = clean_cell(value)
        name = headers[idx] if idx < len(headers) else ""
        if name and name in date_columns:
            value = normalize_date(value)
        else:
            # native dates anywhere; numbers stay numbers outside date columns
            value = normalize_date(value, allow_serial=False)
        out.append(value)
    return out


def normalize_grid(
    grid: Sequence[Sequence[Any]],
    expected_headers: Sequence[str] | None = None,
    scan_limit: int = DEFAULT_SCAN_LIMIT,
    pad_rows: bool = False,
    date_columns: Collection[str] = (),
) -> ParsedSheet:
    """Turn a raw ragged grid into a ParsedSheet.

    Steps:
    1. Detect header row (see header.detect_header_row)
    2. Header cells -> trimmed strings ("" allowed, meaning "ignore column")
    3. Rows below: convert date cells, optionally pad/truncate to header width
    4. Drop fully blank rows; row_count counts only retained rows

    Excel serial numbers are only read as dates in `date_columns`; elsewhere a
    number is a number.

    Args:
        grid: Decoded cell grid, rows of untyped values
        expected_headers: Header vocabulary used to find the header row
        scan_limit: Number of top rows considered as header candidates
        pad_rows: Pad or truncate every data row to the header width
        date_columns: Header names whose numeric cells are Excel date serials

    Returns:
        ParsedSheet with headers, retained rows and their grid row numbers
    """
    if not grid:
        return ParsedSheet.empty()

    header_idx = detect_header_row(grid, expected_headers, scan_limit)
    headers = ["" if is_blank_cell(h) else str(clean_cell(h)).strip() for h in grid[header_idx]]

    rows: Grid = []
    row_numbers: list[int] = []
    for offset, raw in enumerate(grid[header_idx + 1:], start=header_idx + 2):
        if raw is None or all(is_blank_cell(v) for v in raw):
            continue
        row = _convert_row(raw, headers, date_columns)
        if pad_rows:
            row = pad_row(len(headers), row)
        rows.append(row)
        row_numbers.append(offset)

    logger.debug("normalize_grid header_row=%d rows=%d", header_idx, len(rows))
    return ParsedSheet(
        headers=headers,
        rows=rows,
        header_row_index=header_idx,
        row_count=len(rows),
        row_numbers=row_numbers,
    )


def _assemble(headers: Sequence[str], row: Sequence[Any]) -> dict[str, Any]:
    record: dict[str, Any] = {}
    for idx, name in enumerate(headers):
        if not name:
            continue
        record[name] = row[idx] if idx < len(row) else ""
    return record


def assemble_records(headers: Sequence[str], rows: Sequence[Sequence[Any]]) -> list[dict[str, Any]]:
    """Zip header names with row cells; columns with an empty name are skipped.

    Records whose every value is blank are dropped. Row order is kept.
    """
    records = (_assemble(headers, r) for r in rows)
    return [r for r in records if not all(is_blank_cell(v) for v in r.values())]


def assemble_numbered(sheet: ParsedSheet) -> list[tuple[int, dict[str, Any]]]:
    """Like assemble_records() but keeps each record's 1-based grid row number."""
    numbers = sheet.row_numbers or list(range(sheet.header_row_index + 2, sheet.header_row_index + 2 + sheet.row_count))
    out: list[tuple[int, dict[str, Any]]] = []
    for number, row in zip(numbers, sheet.rows, strict=False):
        record = _assemble(sheet.headers, row)
        if all(is_blank_cell(v) for v in record.values()):
            continue
        out.append((number, record))
    return out
