from __future__ import annotations

import json
import re
from pathlib import Path

import pytest

from payroll_ingest.cli.__main__ import EXIT_FATAL, EXIT_PARTIAL_FAILURE, EXIT_SUCCESS_ALL, main as cli_main
from payroll_ingest.excel.reader import read_grid

"""End-to-end CLI runs against real .xlsx files in a temporary working directory."""

COMPENSATION_HEADER = [
    "Upplagd av",
    "Avser Mån/år",
    "Ledare",
    "Kostnadsställe",
    "Aktivitetstyp",
    "Antal",
    "Ersättning",
    "Datum utbet",
    "Eventuell kommentar",
]


@pytest.fixture(autouse=True)
def _no_db(monkeypatch):
    monkeypatch.setenv("DISABLE_DB_CONNECT", "1")


def _summary(out: str) -> str:
    lines = [l for l in out.splitlines() if l.startswith("SUMMARY ")]
    assert len(lines) == 1, out
    return lines[0]


def test_partial_failure_writes_error_log(temp_workdir: Path, write_config: Path, make_excel, personnel_rows, capsys):
    make_excel(temp_workdir / "data" / "personal.xlsx", personnel_rows)
    code = cli_main(["--kind", "personnel", "--reference-date", "2024-06-15"])
    out = capsys.readouterr().out
    assert code == EXIT_PARTIAL_FAILURE
    assert re.match(r"^SUMMARY files=1/1 accepted=4 rejected=1 rows=5 warnings=1 elapsed_sec=", _summary(out))

    rejected = read_grid(temp_workdir / "logs" / "rejected-personal.xlsx")
    assert rejected[0][-1] == "Fel"
    assert rejected[1][2] == "Carlsson"
    assert rejected[1][-1] == "E-post: Ogiltig e-postadress"

    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    entries = [json.loads(l) for l in logs[0].read_text(encoding="utf-8").splitlines()]
    assert entries == [
        {
            "timestamp": entries[0]["timestamp"],
            "file": "personal.xlsx",
            "row": 5,
            "field": "E-post",
            "severity": "error",
            "message": "Ogiltig e-postadress",
        }
    ]


def test_all_rows_accepted(temp_workdir: Path, write_config: Path, make_excel, capsys):
    make_excel(
        temp_workdir / "data" / "ersattning.xlsx",
        [
            COMPENSATION_HEADER,
            ["Kansliet", "2024-03", "Anna Andersson", "101", "Träning", 4, 150, "2024-03-25", ""],
            ["Kansliet", "2024-03", "Bertil Berg", "102 - Innebandy", "Match", 1, 300, "", ""],
        ],
    )
    code = cli_main(["--kind", "compensation"])
    out = capsys.readouterr().out
    assert code == EXIT_SUCCESS_ALL
    assert "accepted=2 rejected=0" in _summary(out)
    assert "mode=mock" in out
    assert not (temp_workdir / "logs").exists()


def test_roster_and_salaries(temp_workdir: Path, write_config: Path, make_excel, capsys):
    roster = make_excel(
        temp_workdir / "roster.xlsx",
        [
            ["Förnamn", "Efternamn", "E-post", "Personnummer", "Sociala Avgifter", "Skattesats", "fortnox_employee_id"],
            ["Anna", "Andersson", "anna@example.se", "19800101-1234", "ja", 30, "E1"],
        ],
    )
    make_excel(
        temp_workdir / "data" / "ersattning.xlsx",
        [
            COMPENSATION_HEADER + ["employee_id"],
            ["", "2024-03", "Anna Andersson", "101", "Träning", 10, 100, "", "", "E1"],
            ["", "2024-03", "Okänd Ledare", "101", "Träning", 1, 100, "", "", ""],
        ],
    )
    code = cli_main(["--kind", "compensation", "--roster", str(roster), "--salaries", "--reference-date", "2024-06-15"])
    out = capsys.readouterr().out
    assert code == EXIT_SUCCESS_ALL
    assert "warnings=1" in _summary(out)
    salary = [l for l in out.splitlines() if l.startswith("SALARY ")]
    assert salary == [
        "SALARY employee=E1 name='Anna Andersson' base=1000.00 holiday=120.00 tax=336.00 social_fees=351.90 net=784.00"
    ]


def test_unreadable_file_is_partial_failure(temp_workdir: Path, write_config: Path, make_excel, personnel_rows, capsys):
    make_excel(temp_workdir / "data" / "a.xlsx", personnel_rows[:4])
    (temp_workdir / "data" / "b.xlsx").write_bytes(b"not a workbook")
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == EXIT_PARTIAL_FAILURE
    assert _summary(out).startswith("SUMMARY files=1/2 accepted=2 rejected=0 ")
    entry = json.loads(next((temp_workdir / "logs").glob("errors-*.log")).read_text(encoding="utf-8"))
    assert (entry["file"], entry["row"], entry["field"]) == ("b.xlsx", -1, "")


def test_empty_directory(temp_workdir: Path, write_config: Path, capsys):
    assert cli_main([]) == EXIT_SUCCESS_ALL
    assert _summary(capsys.readouterr().out).startswith("SUMMARY files=0/0 accepted=0")


def test_missing_config_is_fatal(temp_workdir: Path, capsys):
    assert cli_main([]) == EXIT_FATAL
    assert "ERROR config: config file not found" in capsys.readouterr().out


def test_missing_directory_is_fatal(temp_workdir: Path, capsys):
    (temp_workdir / "config" / "import.yml").write_text("source_directory: ./nowhere\n", encoding="utf-8")
    assert cli_main([]) == EXIT_FATAL
    assert "Directory not found" in capsys.readouterr().out


def test_check_fees(temp_workdir: Path, write_config: Path, capsys):
    assert cli_main(["--check-fees"]) == EXIT_SUCCESS_ALL
    assert "fees: rules=3 errors=0 warnings=0" in capsys.readouterr().out

    (temp_workdir / "config" / "import.yml").write_text(
        "source_directory: ./data\nage_based_fees:\n"
        "  - {lower_bound: 0, upper_bound: 20, fee_rate: 10}\n"
        "  - {lower_bound: 18, upper_bound: null, fee_rate: 31.42}\n",
        encoding="utf-8",
    )
    assert cli_main(["--check-fees"]) == EXIT_FATAL
    assert "ERROR fees: Överlappning" in capsys.readouterr().out


def test_inspect_data(temp_workdir: Path, write_config: Path, make_excel, personnel_rows, capsys):
    make_excel(temp_workdir / "data" / "personal.xlsx", personnel_rows)
    assert cli_main(["--inspect-data"]) == EXIT_SUCCESS_ALL
    out = capsys.readouterr().out
    assert "FILE: personal.xlsx" in out
    assert "header_row=2 rows=5" in out
    assert "SUMMARY" not in out


def test_debug_flag(temp_workdir: Path, write_config: Path, capsys):
    cli_main(["--debug"])
    assert "DEBUG debug mode enabled" in capsys.readouterr().out
