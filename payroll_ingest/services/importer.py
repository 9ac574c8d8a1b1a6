from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

from ..excel.header import DEFAULT_SCAN_LIMIT
from ..excel.reader import assemble_numbered, normalize_grid, read_grid, write_grid
from ..models import compensation as comp
from ..models import personnel as pers
from ..models.import_result import ImportResult, RowFailure
from ..models.row_data import RowData
from ..validation.fields import CostCenterResolver, ValidationContext
from ..validation.records import COMPENSATION, PERSONNEL, is_acceptable, validate_record
from .records import DATE_COLUMNS, build_record, finalize_personnel_record, to_raw_record

"""Bulk import of an uploaded sheet.

Flow per sheet:
1. normalize_grid(): header detection, blank row removal, date cells
2. assemble_numbered(): records keyed by header name, with grid row numbers
3. validate_record() on the text projection of each record
4. acceptable rows are coerced (and personnel identity numbers canonicalized)

A bad row never stops the batch; it is collected as a RowFailure.
"""

__all__ = [
    "EXPECTED_HEADERS",
    "ImportContext",
    "ProcessingError",
    "import_grid",
    "import_file",
    "scan_excel_files",
    "roster_from_results",
    "rejected_workbook",
]

logger = logging.getLogger(__name__)

EXPECTED_HEADERS: dict[str, tuple[str, ...]] = {
    PERSONNEL: pers.PERSONNEL_EXPECTED_HEADERS,
    COMPENSATION: comp.COMPENSATION_EXPECTED_HEADERS,
}


class ProcessingError(Exception):
    """Fatal error that prevents a run (missing directory, unreadable file)."""


@dataclass(frozen=True)
class ImportContext:
    """Everything an import needs besides the grid itself."""
    reference_date: date
    cost_centers: CostCenterResolver | None = None
    personnel: Sequence[dict[str, Any]] = field(default_factory=tuple)  # roster for name checks
    scan_limit: int = DEFAULT_SCAN_LIMIT
    pad_rows: bool = False

    def validation_context(self) -> ValidationContext:
        return ValidationContext.with_roster(self.personnel, self.cost_centers)


def import_grid(
    grid: Sequence[Sequence[Any]], kind: str, context: ImportContext, source: str | None = None
) -> ImportResult:
    """Run the full import flow on a decoded grid.

    Args:
        grid: Decoded cell grid of one sheet
        kind: "personnel" or "compensation"
        context: Reference date, cost centers, roster and grid options
        source: File name recorded on the result and in log lines

    Returns:
        ImportResult with accepted rows and rejected rows with their warnings

    Raises:
        ValueError: If `kind` is not a known record kind
    """
    if kind not in EXPECTED_HEADERS:
        raise ValueError(f"unknown record kind: {kind!r}")

    sheet = normalize_grid(
        grid,
        expected_headers=EXPECTED_HEADERS[kind],
        scan_limit=context.scan_limit,
        pad_rows=context.pad_rows,
        date_columns=DATE_COLUMNS[kind],
    )
    if sheet.is_empty:
        logger.info("no data rows found (source=%s)", source or "-")
        return ImportResult(kind=kind, header_row_index=sheet.header_row_index, headers=sheet.headers, source=source)

    vctx = context.validation_context()
    accepted: list[RowData] = []
    rejected: list[RowFailure] = []
    for row_number, assembled in assemble_numbered(sheet):
        raw = to_raw_record(kind, assembled)
        warnings = validate_record(kind, raw, vctx)
        if not is_acceptable(warnings):
            rejected.append(RowFailure(row_number=row_number, values=raw, warnings=warnings))
            logger.debug("row %d rejected: %s", row_number, ", ".join(w.field for w in warnings if w.is_error))
            continue
        values = build_record(kind, assembled)
        if kind == PERSONNEL:
            values = finalize_personnel_record(values, context.reference_date)
        accepted.append(RowData(row_number=row_number, values=values, raw_values=assembled, warnings=warnings))

    logger.debug(
        "import kind=%s header_row=%d accepted=%d rejected=%d",
        kind, sheet.header_row_index, len(accepted), len(rejected),
    )
    return ImportResult(
        kind=kind,
        accepted=accepted,
        rejected=rejected,
        header_row_index=sheet.header_row_index,
        headers=sheet.headers,
        source=source,
    )


def import_file(path: Path, kind: str, context: ImportContext) -> ImportResult:
    """Decode `path` and import its first sheet.

    Raises GridReadError when the file cannot be decoded.
    """
    grid = read_grid(path)
    return import_grid(grid, kind, context, source=path.name)


def scan_excel_files(directory: Path) -> list[Path]:
    """List .xlsx files directly under `directory`, sorted by name.

    Excel lock files ("~$name.xlsx") are skipped.
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")
    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")
    try:
        return sorted(
            p for p in directory.iterdir()
            if p.is_file() and p.suffix.lower() == ".xlsx" and not p.name.startswith("~$")
        )
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def roster_from_results(results: Iterable[ImportResult]) -> list[dict[str, Any]]:
    """Accepted personnel records across results, usable as an ImportContext roster."""
    return [v for r in results if r.kind == PERSONNEL for v in r.accepted_values()]


REJECTION_COLUMN = "Fel"


def rejected_workbook(result: ImportResult) -> bytes:
    """Encode the rejected rows of `result` as an xlsx for correction.

    Columns are the kind's field set plus a "Fel" column listing the errors.
    """
    fields = list(pers.PERSONNEL_FIELDS if result.kind == PERSONNEL else comp.COMPENSATION_FIELDS)
    rows = [
        [failure.values.get(f, "") for f in fields]
        + ["; ".join(f"{w.field}: {w.message}" for w in failure.warnings if w.is_error)]
        for failure in result.rejected
    ]
    return write_grid(fields + [REJECTION_COLUMN], rows, sheet_name="Rejected")
