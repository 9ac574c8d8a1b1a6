from __future__ import annotations

from datetime import date

from payroll_ingest.models.fee_rule import AgeFeeRule
from payroll_ingest.services.age_fees import (
    load_fee_table,
    resolve_fee_rate,
    resolve_fee_rate_for_personnummer,
    validate_fee_table,
)

RULES = [
    AgeFeeRule(0, 18, 10.21, "Ungdom"),
    AgeFeeRule(19, 64, 31.42, "Standard"),
    AgeFeeRule(65, None, 10.21, "Pensionär"),
]


def test_resolve_scenario():
    assert resolve_fee_rate(30, RULES) == 31.42
    assert resolve_fee_rate(70, RULES) == 10.21
    assert resolve_fee_rate(18, RULES) == 10.21
    assert resolve_fee_rate(19, RULES) == 31.42


def test_resolve_no_match():
    assert resolve_fee_rate(30, [AgeFeeRule(0, 18, 10.21)]) is None
    assert resolve_fee_rate(30, []) is None


def test_resolve_first_match_even_when_table_overlaps():
    overlapping = [AgeFeeRule(0, 30, 5.0, "A"), AgeFeeRule(25, 64, 20.0, "B")]
    assert not validate_fee_table(overlapping).is_valid
    assert resolve_fee_rate(27, overlapping) == 5.0
    assert resolve_fee_rate(27, list(reversed(overlapping))) == 20.0


def test_resolve_from_identity():
    ref = date(2024, 6, 15)
    assert resolve_fee_rate_for_personnummer("19800101-1234", RULES, ref) == 31.42
    assert resolve_fee_rate_for_personnummer("20100101-1234", RULES, ref) == 10.21
    assert resolve_fee_rate_for_personnummer("garbage", RULES, ref) is None


def test_valid_table():
    report = validate_fee_table(RULES)
    assert report.is_valid
    assert report.errors == [] and report.warnings == []


def test_overlap_is_error():
    report = validate_fee_table([AgeFeeRule(0, 20, 10.0, "A"), AgeFeeRule(18, 64, 31.42, "B")])
    assert len(report.errors) == 1
    assert report.errors[0].startswith("Överlappning")


def test_gap_is_warning_only():
    report = validate_fee_table([AgeFeeRule(0, 18, 10.0, "A"), AgeFeeRule(25, 64, 31.42, "B")])
    assert report.is_valid
    assert len(report.warnings) == 1
    assert "Lucka" in report.warnings[0]


def test_rule_level_checks():
    report = validate_fee_table(
        [AgeFeeRule(-1, 10, 5.0, "neg"), AgeFeeRule(20, 20, 5.0, "flat"), AgeFeeRule(30, 150, 120.0, "old")]
    )
    assert any("negativ" in e for e in report.errors)
    assert any("större än lägsta" in e for e in report.errors)
    assert any("mellan 0 och 100" in e for e in report.errors)
    assert any("ovanligt hög" in w for w in report.warnings)


def test_validation_sorts_by_lower_bound():
    report = validate_fee_table(list(reversed(RULES)))
    assert report.is_valid


def test_load_fee_table_accepts_both_key_styles():
    rules = load_fee_table(
        [
            {"lower_bound": 0, "upper_bound": 18, "fee_rate": 10.21},
            {"lowerBound": 65, "upperBound": None, "feeRate": 10.21, "description": "65+"},
        ]
    )
    assert rules[0] == AgeFeeRule(0, 18, 10.21)
    assert rules[1].upper_bound is None
    assert rules[1].label() == "65-∞"
    assert load_fee_table(None) == []


def test_complete_open_ended_table_covers_every_age():
    assert validate_fee_table(RULES).warnings == []
    assert all(resolve_fee_rate(age, RULES) is not None for age in range(0, 130))


def test_complete_bounded_table_covers_its_range_only():
    bounded = [AgeFeeRule(0, 18, 10.21), AgeFeeRule(19, 64, 31.42)]
    report = validate_fee_table(bounded)
    assert report.is_valid and report.warnings == []
    assert all(resolve_fee_rate(age, bounded) is not None for age in range(0, 65))
    assert resolve_fee_rate(65, bounded) is None
