from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date
from typing import Any

from ..models.fee_rule import AgeFeeRule, FeeTableReport
from ..validation.personnummer import derive_age

"""Age based employer fee resolution.

validate_fee_table() reports overlaps (errors), gaps (warnings) and
structural problems. resolve_fee_rate() is a plain first-match lookup in
table order and does not depend on the table having passed validation, so a
misconfigured table still resolves deterministically and stays visible.
"""

__all__ = [
    "MAX_REASONABLE_AGE",
    "load_fee_table",
    "validate_fee_table",
    "resolve_fee_rate",
    "resolve_fee_rate_for_personnummer",
]

MAX_REASONABLE_AGE = 120


def load_fee_table(items: Iterable[dict[str, Any]] | None) -> list[AgeFeeRule]:
    return [AgeFeeRule.from_dict(i) for i in (items or [])]


def _describe(rule: AgeFeeRule) -> str:
    return f'"{rule.description}" ({rule.label()})'


def validate_fee_table(rules: Sequence[AgeFeeRule]) -> FeeTableReport:
    """Check a fee table without changing it.

    Overlapping ranges and invalid bounds or rates are errors; a gap between
    consecutive ranges and an implausibly high upper bound are warnings.

    Args:
        rules: Fee rules in any order

    Returns:
        FeeTableReport; `is_valid` is False when any error was found
    """
    errors: list[str] = []
    warnings: list[str] = []
    ordered = sorted(rules, key=lambda r: r.lower_bound)

    for current, nxt in zip(ordered, ordered[1:]):
        if current.upper_bound is None:
            continue
        if current.upper_bound >= nxt.lower_bound:
            errors.append(f"Överlappning mellan regel {_describe(current)} och {_describe(nxt)}")
        elif current.upper_bound + 1 < nxt.lower_bound:
            warnings.append(
                f'Lucka mellan regel "{current.description}" (slutar vid {current.upper_bound}) '
                f'och "{nxt.description}" (börjar vid {nxt.lower_bound})'
            )

    for index, rule in enumerate(ordered, start=1):
        if rule.lower_bound < 0:
            errors.append(f"Regel {index}: Lägsta ålder kan inte vara negativ")
        if rule.upper_bound is not None:
            if rule.upper_bound <= rule.lower_bound:
                errors.append(f"Regel {index}: Högsta ålder måste vara större än lägsta ålder")
            if rule.upper_bound > MAX_REASONABLE_AGE:
                warnings.append(f"Regel {index}: Högsta ålder {rule.upper_bound} verkar ovanligt hög")
        if not 0 <= rule.fee_rate <= 100:
            errors.append(f"Regel {index}: Avgiftssats måste vara mellan 0 och 100%")

    return FeeTableReport(errors=errors, warnings=warnings)


def resolve_fee_rate(age: int, rules: Sequence[AgeFeeRule]) -> float | None:
    """Fee rate of the first rule (table order) covering `age`, else None.

    Ages are whole years; callers floor or derive an integer age first.
    """
    for rule in rules:
        if rule.matches(age):
            return rule.fee_rate
    return None


def resolve_fee_rate_for_personnummer(
    personnummer: str, rules: Sequence[AgeFeeRule], reference_date: date
) -> float | None:
    age = derive_age(personnummer, reference_date)
    if age is None:
        return None
    return resolve_fee_rate(age, rules)
