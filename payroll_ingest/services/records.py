from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from typing import Any

from ..excel.cells import cell_to_text, normalize_date, normalize_period, parse_bool
from ..models import compensation as comp
from ..models import personnel as pers
from ..models.compensation import CompensationStatus
from ..validation.fields import parse_number
from ..validation.personnummer import normalize_personnummer
from .compensation import derive_total

"""Coercion of assembled rows into fixed-shape domain records.

Every output record has exactly the field set of its kind: text fields are
trimmed strings ("" when missing), numbers default to 0, flags to False.
"""

__all__ = [
    "to_raw_record",
    "build_personnel_record",
    "build_compensation_record",
    "build_record",
    "finalize_personnel_record",
    "DATE_COLUMNS",
]

# Columns whose numeric cells are Excel date serials.
DATE_COLUMNS: dict[str, frozenset[str]] = {
    "personnel": frozenset({pers.ANDRINGSDAG}),
    "compensation": frozenset({comp.PAYOUT_DATE, comp.PERIOD}),
}


def _number(value: Any) -> float | int:
    number = parse_number(value)
    if number is None:
        return 0
    return int(number) if number.is_integer() else number


def to_raw_record(kind: str, assembled: Mapping[str, Any]) -> dict[str, Any]:
    """Project an assembled row onto the field set, as trimmed text.

    This is the shape validated during a bulk import: every field present,
    missing cells as "". Unknown columns are dropped.
    """
    fields = pers.PERSONNEL_FIELDS if kind == "personnel" else comp.COMPENSATION_FIELDS
    raw = {f: cell_to_text(assembled.get(f, "")) for f in fields}
    if kind == "compensation":
        raw[comp.PERIOD] = cell_to_text(normalize_period(raw[comp.PERIOD]))
    return raw


def build_personnel_record(row: Mapping[str, Any]) -> dict[str, Any]:
    record: dict[str, Any] = {f: cell_to_text(row.get(f, "")) for f in pers.PERSONNEL_TEXT_FIELDS}
    record[pers.ANDRINGSDAG] = cell_to_text(normalize_date(row.get(pers.ANDRINGSDAG, "")))
    record[pers.SKATTESATS] = _number(row.get(pers.SKATTESATS, ""))
    record[pers.SOCIALA_AVGIFTER] = parse_bool(row.get(pers.SOCIALA_AVGIFTER, ""))
    record[pers.AKTIV] = parse_bool(row.get(pers.AKTIV, ""), default=True)
    return {f: record[f] for f in pers.PERSONNEL_FIELDS}


def finalize_personnel_record(record: dict[str, Any], reference_date: date) -> dict[str, Any]:
    """Apply save-time canonicalization (identity number to 12 digits)."""
    out = dict(record)
    out[pers.PERSONNUMMER] = normalize_personnummer(out.get(pers.PERSONNUMMER, ""), reference_date)
    return out


def build_compensation_record(row: Mapping[str, Any]) -> dict[str, Any]:
    """Coerce a compensation row; the total is always recomputed, status is pending."""
    quantity = _number(row.get(comp.QUANTITY, ""))
    rate = _number(row.get(comp.RATE, ""))
    record: dict[str, Any] = {
        comp.CREATOR: cell_to_text(row.get(comp.CREATOR, "")),
        comp.PERIOD: cell_to_text(normalize_period(row.get(comp.PERIOD, ""))),
        comp.PERSON: cell_to_text(row.get(comp.PERSON, "")),
        comp.EMPLOYEE_ID: cell_to_text(row.get(comp.EMPLOYEE_ID, "")),
        comp.COST_CENTER: cell_to_text(row.get(comp.COST_CENTER, "")),
        comp.ACTIVITY_TYPE: cell_to_text(row.get(comp.ACTIVITY_TYPE, "")),
        comp.QUANTITY: quantity,
        comp.RATE: rate,
        comp.TOTAL: derive_total(quantity, rate),
        comp.PAYOUT_DATE: cell_to_text(normalize_date(row.get(comp.PAYOUT_DATE, ""))),
        comp.COMMENT: cell_to_text(row.get(comp.COMMENT, "")),
        comp.STATUS: CompensationStatus.PENDING.value,
    }
    return record


def build_record(kind: str, row: Mapping[str, Any]) -> dict[str, Any]:
    if kind == "personnel":
        return build_personnel_record(row)
    if kind == "compensation":
        return build_compensation_record(row)
    raise ValueError(f"unknown record kind: {kind!r}")
