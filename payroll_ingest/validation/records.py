from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from ..models import compensation as comp
from ..models import personnel as pers
from ..models.warning import Severity, ValidationResult, ValidationWarning
from .fields import (
    ValidationContext,
    is_blank,
    validate_bankkonto,
    validate_clearingnr,
    validate_cost_center,
    validate_date,
    validate_email,
    validate_period,
    validate_person,
    validate_personnummer,
    validate_quantity,
    validate_rate,
    validate_tax_rate,
)

"""Whole-record validation.

A fixed dispatch table per record kind maps a field name to its validator.
validate_record() runs the required-field check plus every applicable field
validator; a record is acceptable for persistence iff it carries no
error-severity warning.
"""

__all__ = [
    "PERSONNEL",
    "COMPENSATION",
    "RECORD_KINDS",
    "FIELD_VALIDATORS",
    "REQUIRED_FIELDS",
    "validate_field",
    "validate_record",
    "validate_record_result",
    "is_acceptable",
]

PERSONNEL = "personnel"
COMPENSATION = "compensation"
RECORD_KINDS = (PERSONNEL, COMPENSATION)

FieldValidator = Callable[[Any, ValidationContext], list[ValidationWarning]]

_PERSONNEL_VALIDATORS: dict[str, FieldValidator] = {
    pers.PERSONNUMMER: lambda v, ctx: validate_personnummer(v, typing=ctx.typing),
    pers.CLEARINGNR: lambda v, ctx: validate_clearingnr(v),
    pers.BANKKONTO: lambda v, ctx: validate_bankkonto(v),
    pers.EMAIL: lambda v, ctx: validate_email(v),
    pers.ANDRINGSDAG: lambda v, ctx: validate_date(v, pers.ANDRINGSDAG),
    pers.KOSTNADSSTALLE: lambda v, ctx: validate_cost_center(v, ctx.cost_centers),
    pers.SKATTESATS: lambda v, ctx: validate_tax_rate(v),
}

_COMPENSATION_VALIDATORS: dict[str, FieldValidator] = {
    comp.PERSON: lambda v, ctx: validate_person(v, ctx.personnel_names),
    comp.PERIOD: lambda v, ctx: validate_period(v),
    comp.COST_CENTER: lambda v, ctx: validate_cost_center(v, ctx.cost_centers),
    comp.QUANTITY: lambda v, ctx: validate_quantity(v),
    comp.RATE: lambda v, ctx: validate_rate(v),
    comp.PAYOUT_DATE: lambda v, ctx: validate_date(v, comp.PAYOUT_DATE),
}

FIELD_VALIDATORS: dict[str, dict[str, FieldValidator]] = {
    PERSONNEL: _PERSONNEL_VALIDATORS,
    COMPENSATION: _COMPENSATION_VALIDATORS,
}

REQUIRED_FIELDS: dict[str, tuple[str, ...]] = {
    PERSONNEL: pers.PERSONNEL_REQUIRED_FIELDS,
    COMPENSATION: comp.COMPENSATION_REQUIRED_FIELDS,
}

_REQUIRED_MESSAGES: dict[str, str] = {
    PERSONNEL: "Detta fält är obligatoriskt",
    COMPENSATION: "{field} är obligatorisk",
}


def _validators_for(kind: str) -> dict[str, FieldValidator]:
    try:
        return FIELD_VALIDATORS[kind]
    except KeyError:
        raise ValueError(f"unknown record kind: {kind!r}") from None


def validate_field(
    kind: str, field: str, value: Any, context: ValidationContext | None = None
) -> list[ValidationWarning]:
    """Single-field (on-blur) validation. Unknown fields have no rules."""
    validator = _validators_for(kind).get(field)
    if validator is None:
        return []
    return validator(value, context or ValidationContext())


def _required_warnings(kind: str, record: dict[str, Any]) -> list[ValidationWarning]:
    template = _REQUIRED_MESSAGES[kind]
    return [
        ValidationWarning(field=f, message=template.format(field=f), severity=Severity.ERROR)
        for f in REQUIRED_FIELDS[kind]
        if is_blank(record.get(f))
    ]


def validate_record(
    kind: str, record: dict[str, Any], context: ValidationContext | None = None
) -> list[ValidationWarning]:
    """Validate every applicable field of a record (on-submit / bulk import).

    Missing required fields are always errors, regardless of the lenient
    treatment of empty input by the per-field validators.
    """
    ctx = context or ValidationContext()
    validators = _validators_for(kind)
    found = _required_warnings(kind, record)
    for field, validator in validators.items():
        if field in record:
            found.extend(validator(record[field], ctx))
    return found


def validate_record_result(
    kind: str, record: dict[str, Any], context: ValidationContext | None = None
) -> ValidationResult:
    return ValidationResult.from_warnings(validate_record(kind, record, context))


def is_acceptable(warnings: Iterable[ValidationWarning]) -> bool:
    return not any(w.is_error for w in warnings)
