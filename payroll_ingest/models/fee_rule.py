from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""Age based employer fee rule and fee-table validation report."""

__all__ = [
    "AgeFeeRule",
    "FeeTableReport",
]


@dataclass(frozen=True)
class AgeFeeRule:
    """One row of a fee table.

    upper_bound=None means no upper limit (e.g. 65+). Bounds are inclusive.
    """
    lower_bound: int
    upper_bound: int | None
    fee_rate: float  # percentage, 0-100
    description: str = ""

    def matches(self, age: int) -> bool:
        return age >= self.lower_bound and (self.upper_bound is None or age <= self.upper_bound)

    def label(self) -> str:
        upper = "∞" if self.upper_bound is None else str(self.upper_bound)
        return f"{self.lower_bound}-{upper}"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AgeFeeRule:
        """Build from config / settings data (snake_case or camelCase keys)."""
        lower = data.get("lower_bound", data.get("lowerBound", 0))
        upper = data.get("upper_bound", data.get("upperBound"))
        rate = data.get("fee_rate", data.get("feeRate", 0))
        return cls(
            lower_bound=int(lower),
            upper_bound=None if upper is None else int(upper),
            fee_rate=float(rate),
            description=str(data.get("description") or ""),
        )


@dataclass(frozen=True)
class FeeTableReport:
    """Outcome of validating a fee table; warnings never affect validity."""
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors
