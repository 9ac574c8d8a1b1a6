from __future__ import annotations

import logging

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from ..models import compensation as comp
from ..models import personnel as pers
from ..models.compensation import CompensationStatus, StatusTransitionError
from ..models.fee_rule import AgeFeeRule
from .age_fees import resolve_fee_rate_for_personnummer

"""Compensation derivation and salary summaries.

derive_total() is the only source of "Total ersättning"; any total supplied
from outside is overwritten with it before a record is stored or shown.
"""

__all__ = [
    "DEFAULT_HOLIDAY_PAY_RATE",
    "DEFAULT_SOCIAL_FEE_RATE",
    "derive_total",
    "recompute_total",
    "new_compensation_record",
    "PersonCompensation",
    "group_by_person",
    "calculate_total",
    "SalaryItem",
    "SalarySummary",
    "summarize_salaries",
]

logger = logging.getLogger(__name__)

DEFAULT_HOLIDAY_PAY_RATE = 12.0
DEFAULT_SOCIAL_FEE_RATE = 31.42


def _num(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if number == number else 0.0


def derive_total(quantity: float, rate: float) -> float:
    total = _num(quantity) * _num(rate)
    return int(total) if float(total).is_integer() else total


def recompute_total(record: Mapping[str, Any]) -> dict[str, Any]:
    out = dict(record)
    out[comp.TOTAL] = derive_total(out.get(comp.QUANTITY, 0), out.get(comp.RATE, 0))
    return out


def new_compensation_record(**values: Any) -> dict[str, Any]:
    """Create a record with every field present, status pending, total derived.

    Keyword names are the Python-safe aliases below; a caller-supplied status
    or total is ignored.
    """
    aliases = {
        "creator": comp.CREATOR,
        "period": comp.PERIOD,
        "person": comp.PERSON,
        "employee_id": comp.EMPLOYEE_ID,
        "cost_center": comp.COST_CENTER,
        "activity_type": comp.ACTIVITY_TYPE,
        "quantity": comp.QUANTITY,
        "rate": comp.RATE,
        "payout_date": comp.PAYOUT_DATE,
        "comment": comp.COMMENT,
    }
    unknown = set(values) - set(aliases)
    if unknown:
        raise TypeError(f"unknown compensation fields: {sorted(unknown)}")
    record: dict[str, Any] = {f: "" for f in comp.COMPENSATION_FIELDS}
    record[comp.QUANTITY] = 0
    record[comp.RATE] = 0
    for key, value in values.items():
        record[aliases[key]] = value
    record[comp.STATUS] = CompensationStatus.PENDING.value
    return recompute_total(record)


@dataclass
class PersonCompensation:
    person: str
    total: float = 0.0
    records: list[dict[str, Any]] = field(default_factory=list)


def group_by_person(records: Iterable[Mapping[str, Any]], period: str | None = None) -> list[PersonCompensation]:
    """Group by person name (optionally one period), highest total first."""
    grouped: dict[str, PersonCompensation] = {}
    for r in records:
        if period is not None and r.get(comp.PERIOD) != period:
            continue
        name = str(r.get(comp.PERSON, ""))
        entry = grouped.setdefault(name, PersonCompensation(person=name))
        entry.records.append(dict(r))
        entry.total += derive_total(r.get(comp.QUANTITY, 0), r.get(comp.RATE, 0))
    return sorted(grouped.values(), key=lambda g: g.total, reverse=True)


def calculate_total(records: Iterable[Mapping[str, Any]]) -> float:
    return sum(derive_total(r.get(comp.QUANTITY, 0), r.get(comp.RATE, 0)) for r in records)


@dataclass(frozen=True)
class SalaryItem:
    activity_type: str
    quantity: float
    amount: float  # per unit
    cost_center: str
    period: str
    comment: str

    @property
    def total(self) -> float:
        return derive_total(self.quantity, self.amount)


@dataclass(frozen=True)
class SalarySummary:
    """Per-employee payroll figures for one export run."""
    employee_id: str
    employee_name: str
    personnummer: str
    base_salary: float
    holiday_pay: float
    tax: float
    social_fee_rate: float  # percentage actually applied, 0 without the flag
    social_fees: float  # employer cost, not deducted from the employee
    net_salary: float
    clearing_number: str
    account_number: str
    items: list[SalaryItem] = field(default_factory=list)

    @property
    def employer_cost(self) -> float:
        return self.base_salary + self.holiday_pay + self.social_fees


def summarize_salaries(
    compensations: Iterable[Mapping[str, Any]],
    personnel: Sequence[Mapping[str, Any]],
    fee_table: Sequence[AgeFeeRule],
    reference_date: date,
    *,
    holiday_pay_rate: float = DEFAULT_HOLIDAY_PAY_RATE,
    standard_social_fee_rate: float = DEFAULT_SOCIAL_FEE_RATE,
) -> list[SalarySummary]:
    """Build salary summaries for compensations not yet sent.

    Records without employee_id or with an unknown status are skipped. The
    social fee rate comes from the age fee table via the person's identity
    number, falling back to standard_social_fee_rate when no rule covers the
    person.

    Args:
        compensations: Compensation records keyed by column name
        personnel: Personnel records; matched on fortnox_employee_id
        fee_table: Age based employer fee rules
        reference_date: Date used to derive each person's age
        holiday_pay_rate: Holiday pay as a percentage of the base salary
        standard_social_fee_rate: Fee rate when no age rule matches

    Returns:
        One SalarySummary per employee, in first-seen order
    """
    by_employee: dict[str, list[Mapping[str, Any]]] = {}
    for c in compensations:
        try:
            status = CompensationStatus.parse(c.get(comp.STATUS))
        except StatusTransitionError as e:
            logger.warning("salary: skipping %s: %s", c.get(comp.PERSON, ""), e)
            continue
        if status is CompensationStatus.SENT:
            continue
        emp = str(c.get(comp.EMPLOYEE_ID) or "").strip()
        if not emp:
            continue
        by_employee.setdefault(emp, []).append(c)

    people = {str(p.get(pers.EMPLOYEE_REF) or ""): p for p in personnel}
    summaries: list[SalarySummary] = []
    for emp, comps in by_employee.items():
        person = people.get(emp)
        items = [
            SalaryItem(
                activity_type=str(c.get(comp.ACTIVITY_TYPE) or ""),
                quantity=_num(c.get(comp.QUANTITY)),
                amount=_num(c.get(comp.RATE)),
                cost_center=str(c.get(comp.COST_CENTER) or ""),
                period=str(c.get(comp.PERIOD) or ""),
                comment=str(c.get(comp.COMMENT) or ""),
            )
            for c in comps
        ]
        base = sum(i.total for i in items)
        holiday = base * holiday_pay_rate / 100
        gross = base + holiday

        pnr = str(person.get(pers.PERSONNUMMER, "")) if person else ""
        fee_rate = 0.0
        if person and bool(person.get(pers.SOCIALA_AVGIFTER)):
            resolved = resolve_fee_rate_for_personnummer(pnr, fee_table, reference_date)
            fee_rate = standard_social_fee_rate if resolved is None else resolved
        tax_rate = _num(person.get(pers.SKATTESATS)) if person else 0.0
        tax = gross * tax_rate / 100

        if person:
            name = f"{person.get(pers.FORNAMN, '')} {person.get(pers.EFTERNAMN, '')}".strip()
        else:
            name = str(comps[0].get(comp.PERSON) or "Unknown")

        summaries.append(
            SalarySummary(
                employee_id=emp,
                employee_name=name,
                personnummer=pnr,
                base_salary=base,
                holiday_pay=holiday,
                tax=tax,
                social_fee_rate=fee_rate,
                social_fees=gross * fee_rate / 100,
                net_salary=gross - tax,
                clearing_number=str(person.get(pers.CLEARINGNR, "")) if person else "",
                account_number=str(person.get(pers.BANKKONTO, "")) if person else "",
                items=items,
            )
        )
    return summaries
