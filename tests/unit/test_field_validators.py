from __future__ import annotations

import pytest

from payroll_ingest.models.warning import Severity
from payroll_ingest.validation.fields import (
    parse_number,
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

"""Per-field validators: blank input is always valid, otherwise one warning per problem."""


@pytest.mark.parametrize(
    "validator",
    [
        validate_personnummer,
        validate_clearingnr,
        validate_bankkonto,
        validate_email,
        validate_period,
        validate_tax_rate,
        validate_quantity,
        validate_rate,
    ],
)
@pytest.mark.parametrize("blank", [None, "", "   "])
def test_blank_is_valid(validator, blank):
    assert validator(blank) == []


def test_clearingnr():
    found = validate_clearingnr("123")
    assert len(found) == 1
    assert found[0].severity is Severity.WARNING
    assert validate_clearingnr("1234") == []
    assert validate_clearingnr("8327-9") == []
    assert len(validate_clearingnr("123456")) == 1


def test_bankkonto():
    assert validate_bankkonto("1234567") == []
    assert validate_bankkonto("123 456 789 01") == []
    assert len(validate_bankkonto("123456")) == 1
    assert len(validate_bankkonto("12ab567")) == 1


def test_personnummer_rules():
    assert validate_personnummer("19800101-1234") == []
    ten = validate_personnummer("800101-1234")
    assert len(ten) == 1 and ten[0].severity is Severity.WARNING
    short = validate_personnummer("800101")
    assert short[0].is_error and "för kort" in short[0].message
    letters = validate_personnummer("80O101-1234")
    assert letters[0].is_error and "siffror" in letters[0].message
    assert validate_personnummer("1980010112345")[0].is_error


def test_personnummer_typing_mode_waits_for_ten_characters():
    assert validate_personnummer("8001", typing=True) == []
    assert validate_personnummer("800101-12", typing=True) == []
    assert validate_personnummer("80O101-1234", typing=True)[0].is_error


def test_email():
    assert validate_email("anna@example.se") == []
    found = validate_email("invalid-email")
    assert len(found) == 1 and found[0].field == "E-post" and found[0].is_error
    assert len(validate_email("a b@example.se")) == 1


def test_date():
    assert validate_date("2024-02-29", "Ändringsdag") == []
    assert validate_date("2024-2-1", "Ändringsdag")[0].message == "Datum ska vara i format YYYY-MM-DD"
    assert validate_date("2023-02-29", "Ändringsdag")[0].message == "Ogiltigt datum"


def test_period():
    assert validate_period("2024-03") == []
    assert len(validate_period("2024-3")) == 1
    assert len(validate_period("2024-13")) == 1


def test_cost_center(cost_centers):
    assert validate_cost_center("101 - Fotboll", cost_centers) == []
    assert validate_cost_center("102", cost_centers) == []
    found = validate_cost_center("999", cost_centers)
    assert found[0].is_error and "999" in found[0].message
    assert validate_cost_center("999", None) == []


def test_numeric_fields():
    assert validate_tax_rate("30,5") == []
    assert len(validate_tax_rate("101")) == 1
    assert len(validate_tax_rate("trettio")) == 1
    assert validate_quantity("2") == []
    assert len(validate_quantity("0")) == 1
    assert len(validate_quantity("-1")) == 1
    assert validate_rate("0") == []
    assert len(validate_rate("-0.5")) == 1


def test_parse_number():
    assert parse_number("1 234,5") == 1234.5
    assert parse_number(3) == 3.0
    assert parse_number(True) is None
    assert parse_number("") is None
    assert parse_number(float("nan")) is None


def test_person_roster_warning():
    roster = frozenset({"anna andersson"})
    assert validate_person("Anna Andersson", roster) == []
    found = validate_person("Okänd Person", roster)
    assert found[0].severity is Severity.WARNING
    assert validate_person("Okänd Person", frozenset()) == []
