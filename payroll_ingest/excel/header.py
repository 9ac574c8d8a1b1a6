from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from .cells import cell_to_text

"""Header row detection.

Uploaded sheets often carry a title, a blank line or a note above the real
header. Only the first `scan_limit` rows are candidates; each is scored by
how many of its cells resemble an expected header.
"""

__all__ = [
    "DEFAULT_SCAN_LIMIT",
    "score_row",
    "detect_header_row",
]

DEFAULT_SCAN_LIMIT = 5


def _norm(value: Any) -> str:
    return cell_to_text(value).lower()


def score_row(row: Sequence[Any], expected: Sequence[str]) -> int:
    """Count cells equal to, containing, or contained in an expected header.

    `expected` must already be normalized (trimmed, lower-cased, non-empty).
    """
    score = 0
    for cell in row:
        n = _norm(cell)
        if n and any(eh == n or n in eh or eh in n for eh in expected):
            score += 1
    return score


def detect_header_row(
    grid: Sequence[Sequence[Any]],
    expected_headers: Sequence[str] | None = None,
    scan_limit: int = DEFAULT_SCAN_LIMIT,
) -> int:
    """Return the 0-based index of the most likely header row.

    No vocabulary means row 0. Ties go to the earliest row. Never fails: a
    grid without any match still yields the best (zero) scoring row, and the
    caller is expected to notice an empty or invalid record set downstream.

    Args:
        grid: Decoded cell grid
        expected_headers: Header vocabulary; None or empty means row 0
        scan_limit: Only the first `scan_limit` rows are scored
    """
    if not grid or not expected_headers:
        return 0
    expected = [e for e in (_norm(h) for h in expected_headers) if e]
    if not expected:
        return 0

    best_row = 0
    best_score = -1
    for i in range(min(scan_limit, len(grid))):
        score = score_row(grid[i], expected)
        if score > best_score:
            best_score = score
            best_row = i
    return best_row
