from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""Normalized grid produced by the grid normalizer."""

__all__ = [
    "ParsedSheet",
]


@dataclass(frozen=True)
class ParsedSheet:
    headers: list[str]  # Header mapping; "" marks an ignored column
    rows: list[list[Any]]  # Non-blank data rows below the header
    header_row_index: int  # 0-based index of the header row in the raw grid
    row_count: int  # len(rows)
    row_numbers: list[int] = field(default_factory=list)  # 1-based grid row of each data row

    @property
    def is_empty(self) -> bool:
        return self.row_count == 0

    @classmethod
    def empty(cls) -> ParsedSheet:
        return cls(headers=[], rows=[], header_row_index=0, row_count=0)
