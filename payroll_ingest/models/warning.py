from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

"""Validation warning model.

Validators never raise; they return lists of ValidationWarning so that a bulk
import can keep going after a bad row. Severity decides whether a record may
be persisted: any ERROR blocks it, WARNING alone does not.
"""

__all__ = [
    "Severity",
    "ValidationWarning",
    "ValidationResult",
]


class Severity(Enum):
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class ValidationWarning:
    """One finding for one field (never persisted, always recomputed)."""
    field: str
    message: str
    severity: Severity = Severity.ERROR

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message, "severity": self.severity.value}


@dataclass(frozen=True)
class ValidationResult:
    """Warnings partitioned by severity."""
    errors: list[ValidationWarning] = field(default_factory=list)
    warnings: list[ValidationWarning] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @classmethod
    def from_warnings(cls, items: Iterable[ValidationWarning]) -> ValidationResult:
        errors: list[ValidationWarning] = []
        warnings: list[ValidationWarning] = []
        for w in items:
            (errors if w.is_error else warnings).append(w)
        return cls(errors=errors, warnings=warnings)

    def fields_with_errors(self) -> set[str]:
        return {w.field for w in self.errors}
