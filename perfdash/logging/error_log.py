from __future__ import annotations

import threading
from datetime import UTC, datetime
from pathlib import Path

from perfdash.models.error_record import FetchErrorRecord

"""Fetch failure log buffering.

Failed sheet fetches are collected in memory while a merge cycle runs (from
several worker threads) and written once as JSON Lines to
``logs/fetch-errors-YYYYMMDD-HHMMSS.log`` (UTC).
"""

__all__ = [
    "FetchErrorRecord",
    "FetchErrorLog",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class FetchErrorLog:
    """In-memory buffer of fetch failures. ``flush()`` writes JSON Lines."""

    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[FetchErrorRecord] = []
        self._lock = threading.Lock()
        self._logs_dir = logs_dir if logs_dir is not None else LOGS_DIR
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"fetch-errors-{stamp}.log"
        return self._file_path

    @property
    def records(self) -> list[FetchErrorRecord]:
        with self._lock:
            return list(self._records)

    def append(self, record: FetchErrorRecord) -> None:
        with self._lock:
            self._records.append(record)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def flush(self) -> Path | None:
        """Append buffered records to the log file.

        Returns:
            The log file path, or None when there was nothing to write
        """
        with self._lock:
            if not self._records:
                return None
            fp = self.file_path
            fp.parent.mkdir(parents=True, exist_ok=True)
            with fp.open("a", encoding="utf-8") as f:
                for r in self._records:
                    f.write(r.to_json_line() + "\n")
            self._records.clear()
        return fp
