from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

"""Cost-center directory.

In-memory implementation of the cost-center lookup used by the validators.
Built from organisation settings (config/import.yml `cost_centers`).
"""

__all__ = [
    "CostCenter",
    "CostCenterDirectory",
]


@dataclass(frozen=True)
class CostCenter:
    code: str
    name: str
    description: str = ""

    @property
    def display_text(self) -> str:
        return f"{self.code} - {self.name}"


class CostCenterDirectory:
    """Lookup by display text ("101 - Fotboll"), code or name.

    Entries with an empty name are ignored, and entries are kept sorted by
    display text.
    """

    def __init__(self, centers: Iterable[CostCenter]) -> None:
        kept = [c for c in centers if c.name and c.name.strip()]
        self._centers = sorted(kept, key=lambda c: c.display_text.lower())

    @classmethod
    def from_config(cls, items: Iterable[dict[str, Any]] | None) -> CostCenterDirectory:
        return cls(
            CostCenter(
                code=str(i.get("code", "")).strip(),
                name=str(i.get("name", "")).strip(),
                description=str(i.get("description") or "").strip(),
            )
            for i in (items or [])
        )

    def __len__(self) -> int:
        return len(self._centers)

    @property
    def centers(self) -> list[CostCenter]:
        return list(self._centers)

    def find(self, text: str) -> CostCenter | None:
        if not text:
            return None
        text = text.strip()
        for c in self._centers:
            if text in (c.display_text, c.code, c.name):
                return c
        return None

    def is_valid(self, text: str) -> bool:
        if not text.strip():
            return True
        return self.find(text) is not None

    def resolve_display_text(self, code: str) -> str:
        found = self.find(code)
        return found.display_text if found else code

    def search(self, term: str) -> list[CostCenter]:
        if not term.strip():
            return self.centers
        needle = term.strip().lower()
        return [
            c
            for c in self._centers
            if needle in c.display_text.lower()
            or needle in c.code.lower()
            or needle in c.name.lower()
            or needle in c.description.lower()
        ]
