from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display for sheet fetches with tqdm (TTY only).

In non-TTY environments (CI, piped output) the bar is disabled so that no
ANSI control sequences end up in logs.
"""

__all__ = [
    "FetchProgress",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    """Check if stdout is a TTY and progress should be displayed."""
    return sys.stdout.isatty()


class FetchProgress:
    """Progress bar over the sheets of one merge cycle."""

    def __init__(self, total_sheets: int, *, description: str = "Fetching sheets") -> None:
        self.total_sheets = total_sheets
        self.description = description
        self.completed = 0
        self.failed = 0

        self.enabled = is_tty_enabled() and total_sheets > 0
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_sheets,
                desc=description,
                unit="sheet",
                leave=False,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def sheet_done(self, sheet_name: str, success: bool = True) -> None:
        """Record one finished sheet fetch."""
        self.completed += 1
        if not success:
            self.failed += 1
        if self.pbar is not None:
            self.pbar.set_postfix(sheet=sheet_name, failed=self.failed)
            self.pbar.update(1)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> FetchProgress:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
