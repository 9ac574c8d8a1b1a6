from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .warning import ValidationWarning

"""RowData model.

RowData represents one assembled and coerced record together with the
spreadsheet row it came from and the warnings found for it.
"""

__all__ = [
    "RowData",
]


@dataclass(frozen=True)
class RowData:
    """Logical representation of a single data row after normalization.

    row_number is the 1-based spreadsheet row (header row + offset), so it can
    be shown to the person who uploaded the file.
    """
    row_number: int  # 1-based spreadsheet row
    values: dict[str, Any]  # Field name -> coerced value (fixed field set)
    raw_values: dict[str, Any] | None = None  # Assembled values before coercion
    warnings: list[ValidationWarning] = field(default_factory=list)

    @property
    def invalid(self) -> bool:
        return any(w.is_error for w in self.warnings)
