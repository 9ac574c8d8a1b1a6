from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .row_data import RowData
from .warning import ValidationWarning

"""Import result models.

A bulk import never stops at the first bad row: failing rows are collected as
RowFailure entries next to the accepted rows.
"""

__all__ = [
    "RowFailure",
    "ImportResult",
]


@dataclass(frozen=True)
class RowFailure:
    """A row that has at least one error-severity warning."""
    row_number: int
    values: dict[str, Any]
    warnings: list[ValidationWarning]

    @property
    def error_fields(self) -> list[str]:
        seen: list[str] = []
        for w in self.warnings:
            if w.is_error and w.field not in seen:
                seen.append(w.field)
        return seen


@dataclass(frozen=True)
class ImportResult:
    """Aggregated result for one uploaded sheet."""
    kind: str  # "personnel" | "compensation"
    accepted: list[RowData] = field(default_factory=list)
    rejected: list[RowFailure] = field(default_factory=list)
    header_row_index: int = 0
    headers: list[str] = field(default_factory=list)
    source: str | None = None  # file name, when imported from disk

    @property
    def total_rows(self) -> int:
        return len(self.accepted) + len(self.rejected)

    @property
    def is_empty(self) -> bool:
        return self.total_rows == 0

    @property
    def warning_count(self) -> int:
        return sum(len(r.warnings) for r in self.accepted)

    def accepted_values(self) -> list[dict[str, Any]]:
        return [r.values for r in self.accepted]
