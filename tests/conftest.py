# Shared pytest fixtures
from __future__ import annotations

import tempfile
from datetime import date
from pathlib import Path

import pandas as pd
import pytest

from payroll_ingest.logging.init import reset_logging
from payroll_ingest.services.cost_centers import CostCenter, CostCenterDirectory


PERSONNEL_HEADER = ["Förnamn", "Efternamn", "E-post", "Personnummer", "Clearingnr", "Bankkonto", "Kostnadsställe"]


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def reference_date() -> date:
    return date(2024, 6, 15)


@pytest.fixture()
def cost_centers() -> CostCenterDirectory:
    return CostCenterDirectory(
        [
            CostCenter("101", "Fotboll"),
            CostCenter("102", "Innebandy"),
            CostCenter("200", "Kansli", "Administration"),
        ]
    )


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
scan_limit: 5
cost_centers:
  - {code: "101", name: Fotboll}
  - {code: "102", name: Innebandy}
age_based_fees:
  - {lower_bound: 0, upper_bound: 18, fee_rate: 10.21, description: Ungdom}
  - {lower_bound: 19, upper_bound: 64, fee_rate: 31.42, description: Standard}
  - {lower_bound: 65, upper_bound: null, fee_rate: 10.21, description: Pensionär}
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def make_excel():
    """Write rows (no pandas header) into a single-sheet .xlsx file."""
    def _make(path: Path, rows: list[list[object]], sheet_name: str = "Blad1") -> Path:
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
        return path
    return _make


@pytest.fixture()
def personnel_rows() -> list[list[object]]:
    """Title row, header row, five people; the third has a broken e-mail."""
    return [
        ["Personallista 2024"],
        PERSONNEL_HEADER,
        ["Anna", "Andersson", "anna@example.se", "198001011234", "8327", "1234567", "101 - Fotboll"],
        ["Bertil", "Berg", "bertil@example.se", "19750505-4321", "", "", "102 - Innebandy"],
        ["Cecilia", "Carlsson", "invalid-email", "199912312345", "", "", ""],
        ["David", "Dahl", "david@example.se", "", "", "", "101"],
        ["Eva", "Ek", "eva@example.se", "0501011234", "", "", ""],
    ]
