from __future__ import annotations

from enum import Enum

"""Compensation record shape and export status lifecycle.

State transitions: pending → (sent | error), error → (sent | error).
A freshly assembled record is always pending; only the export outcome moves
it forward.
"""

__all__ = [
    "COMPENSATION_FIELDS",
    "COMPENSATION_EXPECTED_HEADERS",
    "COMPENSATION_REQUIRED_FIELDS",
    "CompensationStatus",
    "StatusTransitionError",
]

CREATOR = "Upplagd av"
PERIOD = "Avser Mån/år"
PERSON = "Ledare"
EMPLOYEE_ID = "employee_id"
COST_CENTER = "Kostnadsställe"
ACTIVITY_TYPE = "Aktivitetstyp"
QUANTITY = "Antal"
RATE = "Ersättning"
TOTAL = "Total ersättning"
PAYOUT_DATE = "Datum utbet"
COMMENT = "Eventuell kommentar"
STATUS = "Fortnox status"

COMPENSATION_FIELDS: tuple[str, ...] = (
    CREATOR,
    PERIOD,
    PERSON,
    EMPLOYEE_ID,
    COST_CENTER,
    ACTIVITY_TYPE,
    QUANTITY,
    RATE,
    TOTAL,
    PAYOUT_DATE,
    COMMENT,
    STATUS,
)

COMPENSATION_EXPECTED_HEADERS: tuple[str, ...] = (
    CREATOR,
    PERIOD,
    PERSON,
    COST_CENTER,
    ACTIVITY_TYPE,
    QUANTITY,
    RATE,
    PAYOUT_DATE,
    COMMENT,
)

COMPENSATION_REQUIRED_FIELDS: tuple[str, ...] = (
    PERSON,
    PERIOD,
    COST_CENTER,
    ACTIVITY_TYPE,
    QUANTITY,
    RATE,
)


class StatusTransitionError(Exception):
    """Raised when a status change is not allowed by the lifecycle."""


class CompensationStatus(Enum):
    """Export status of a compensation record.

    - PENDING: created, not yet handed to the payroll system
    - SENT: export succeeded (terminal)
    - ERROR: export failed, may be retried
    """
    PENDING = "pending"
    SENT = "sent"
    ERROR = "error"

    @classmethod
    def parse(cls, value: object) -> CompensationStatus:
        if isinstance(value, CompensationStatus):
            return value
        text = str(value or "").strip().lower()
        if not text:
            return cls.PENDING
        try:
            return cls(text)
        except ValueError as e:
            raise StatusTransitionError(f"unknown status: {value!r}") from e

    def after_export(self, success: bool) -> CompensationStatus:
        """Return the status that follows an export attempt."""
        target = CompensationStatus.SENT if success else CompensationStatus.ERROR
        if target not in _TRANSITIONS[self]:
            raise StatusTransitionError(f"cannot move from {self.value} to {target.value}")
        return target


_TRANSITIONS: dict[CompensationStatus, frozenset[CompensationStatus]] = {
    CompensationStatus.PENDING: frozenset({CompensationStatus.SENT, CompensationStatus.ERROR}),
    CompensationStatus.ERROR: frozenset({CompensationStatus.SENT, CompensationStatus.ERROR}),
    CompensationStatus.SENT: frozenset(),
}
