from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from tqdm import tqdm

"""File progress display with tqdm.

The bar is only drawn when stdout is a TTY; in CI and when output is piped
every method is a no-op so log lines stay clean.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """One progress bar over the files of a run."""

    def __init__(self, total_files: int, *, description: str = "Importing files") -> None:
        """Create the tracker; a tqdm bar is only created on a TTY.

        Args:
            total_files: Number of files the run will process
            description: Base text shown before the bar
        """
        self.total_files = total_files
        self.description = description
        self.current_file = 0
        self.enabled = is_tty_enabled()
        self.pbar: tqdm[Any] | None = None
        if self.enabled:
            self.pbar = tqdm(
                total=total_files,
                desc=description,
                unit="file",
                leave=True,
                ncols=80,
                ascii=True,
            )

    def start_file(self, file_path: Path) -> None:
        """Show `file_path` as the file currently being imported.

        Args:
            file_path: Workbook about to be imported
        """
        self.current_file += 1
        if self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({file_path.name})")

    def finish_file(self, **stats: Any) -> None:
        """Advance by one file.

        Args:
            **stats: Running counts (accepted, rejected, failed) shown as postfix
        """
        if self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_description(self.description)
            if stats:
                self.pbar.set_postfix(**stats)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
