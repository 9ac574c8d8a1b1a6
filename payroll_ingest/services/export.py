from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from ..models import compensation as comp
from ..models.compensation import CompensationStatus, StatusTransitionError
from ..validation.fields import ValidationContext
from ..validation.records import COMPENSATION, is_acceptable, validate_record
from .compensation import recompute_total
from .records import to_raw_record

"""Hand-off of compensation records to the payroll export collaborator.

Each record's outcome drives its status: success -> sent, failure -> error.
Records with error-severity warnings or an unknown status are never handed
over. A failing record does not stop the batch.
"""

__all__ = [
    "ExportError",
    "Exporter",
    "ExportReport",
    "export_compensations",
]

logger = logging.getLogger(__name__)


class ExportError(Exception):
    """Raised by an Exporter when a single record could not be delivered."""


class Exporter(Protocol):
    def send(self, record: Mapping[str, Any]) -> None:
        """Deliver one record. It already carries the status it gets on success."""
        ...


@dataclass
class ExportReport:
    records: list[dict[str, Any]] = field(default_factory=list)  # with updated status
    sent: int = 0
    failed: int = 0
    skipped: int = 0  # already sent
    rejected: int = 0  # not acceptable, never sent
    errors: list[str] = field(default_factory=list)


def export_compensations(
    records: Iterable[Mapping[str, Any]],
    exporter: Exporter,
    context: ValidationContext | None = None,
) -> ExportReport:
    """Send pending / errored records; already-sent ones are left untouched.

    Args:
        records: Compensation records keyed by column name
        exporter: Collaborator that delivers one record or raises ExportError
        context: Validation context (cost centers, roster); defaults to no lookups

    Returns:
        ExportReport with every input record, in order, carrying its new status
    """
    report = ExportReport()
    for number, record in enumerate(records, start=1):
        out = recompute_total(record)
        label = f"record {number} ({out.get(comp.PERSON, '')})"
        try:
            current = CompensationStatus.parse(record.get(comp.STATUS))
        except StatusTransitionError as e:
            report.failed += 1
            report.errors.append(f"{label}: {e}")
            report.records.append(out)
            logger.warning("export skipped record=%d: %s", number, e)
            continue
        out[comp.STATUS] = current.value
        if current is CompensationStatus.SENT:
            report.skipped += 1
            report.records.append(out)
            continue

        warnings = validate_record(COMPENSATION, to_raw_record(COMPENSATION, out), context)
        if not is_acceptable(warnings):
            report.rejected += 1
            report.errors.extend(f"{label}: {w.field}: {w.message}" for w in warnings if w.is_error)
            report.records.append(out)
            logger.warning("export rejected record=%d: invalid fields", number)
            continue

        try:
            exporter.send({**out, comp.STATUS: current.after_export(success=True).value})
        except ExportError as e:
            out[comp.STATUS] = current.after_export(success=False).value
            report.failed += 1
            report.errors.append(f"{label}: {e}")
            logger.warning("export failed record=%d: %s", number, e)
        else:
            out[comp.STATUS] = current.after_export(success=True).value
            report.sent += 1
        report.records.append(out)
    return report
