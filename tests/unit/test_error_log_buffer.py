from __future__ import annotations

import json
from pathlib import Path

from payroll_ingest.logging.error_log import ErrorLogBuffer
from payroll_ingest.models.error_record import ErrorRecord
from payroll_ingest.models.import_result import ImportResult, RowFailure
from payroll_ingest.models.warning import Severity, ValidationWarning


def test_record_create_and_json_line():
    r = ErrorRecord.create("personal.xlsx", 5, "E-post", "error", "Ogiltig e-postadress")
    assert r.timestamp.endswith("Z")
    data = json.loads(r.to_json_line())
    assert list(data) == ["timestamp", "file", "row", "field", "severity", "message"]
    assert data["message"] == "Ogiltig e-postadress"


def test_flush_empty_writes_nothing(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path / "logs")
    assert buf.flush() is None
    assert not (tmp_path / "logs").exists()


def test_add_result_records_only_errors(tmp_path: Path):
    failure = RowFailure(
        row_number=5,
        values={},
        warnings=[
            ValidationWarning("E-post", "Ogiltig e-postadress"),
            ValidationWarning("Clearingnr", "Clearingnummer ska vara 4-5 siffror", Severity.WARNING),
        ],
    )
    result = ImportResult(kind="personnel", rejected=[failure], source="personal.xlsx")
    buf = ErrorLogBuffer(logs_dir=tmp_path / "logs")
    assert buf.add_result(result) == 1
    path = buf.flush()
    assert path is not None and path.name.startswith("errors-") and path.suffix == ".log"
    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    entry = json.loads(lines[0])
    assert (entry["file"], entry["row"], entry["field"], entry["severity"]) == ("personal.xlsx", 5, "E-post", "error")
    assert len(buf) == 0
