from __future__ import annotations

from collections.abc import Sequence

from ..models.import_result import ImportResult

"""SUMMARY line rendering.

Format:
SUMMARY files={ok}/{total} accepted={n} rejected={n} rows={n} warnings={n} elapsed_sec={s}

`ok` counts files that were decoded (a file that could not be read is
counted in `total` only).
"""

__all__ = [
    "format_seconds",
    "render_summary_line",
]


def format_seconds(value: float) -> str:
    """Integers without decimals; tiny values without scientific notation."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(results: Sequence[ImportResult], total_files: int | None = None, elapsed_seconds: float = 0.0) -> str:
    """Render the SUMMARY line for a run.

    >>> render_summary_line([], total_files=0)
    'SUMMARY files=0/0 accepted=0 rejected=0 rows=0 warnings=0 elapsed_sec=0'
    """
    total = len(results) if total_files is None else total_files
    accepted = sum(len(r.accepted) for r in results)
    rejected = sum(len(r.rejected) for r in results)
    warnings = sum(r.warning_count for r in results)
    return (
        f"SUMMARY files={len(results)}/{total} "
        f"accepted={accepted} "
        f"rejected={rejected} "
        f"rows={accepted + rejected} "
        f"warnings={warnings} "
        f"elapsed_sec={format_seconds(elapsed_seconds)}"
    )
