from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

from .warning import ValidationWarning

"""ErrorRecord model for the JSON Lines error log.

One record per rejected field (or per unreadable file, with row=-1 and an
empty field name).
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: spreadsheet file name
        row: 1-based spreadsheet row, -1 when the row is unknown
        field: field name ("" for file-level errors)
        severity: "error" or "warning"
        message: user facing message
    """
    timestamp: str
    file: str
    row: int
    field: str
    severity: str
    message: str

    @staticmethod
    def create(file: str, row: int, field: str, severity: str, message: str) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(timestamp=ts, file=file, row=row, field=field, severity=severity, message=message)

    @staticmethod
    def from_warning(file: str, row: int, warning: ValidationWarning) -> ErrorRecord:
        return ErrorRecord.create(file, row, warning.field, warning.severity.value, warning.message)

    def to_json_line(self) -> str:
        # asdict keeps the key set fixed
        return json.dumps(asdict(self), ensure_ascii=False)
