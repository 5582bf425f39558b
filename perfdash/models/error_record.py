from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""FetchErrorRecord model for the fetch failure log.

One record per sheet (or sheet listing) that could not be fetched. The record
is serialized as a single JSON Lines entry with a fixed key set.
"""

__all__ = [
    "FetchErrorRecord",
]


@dataclass(frozen=True)
class FetchErrorRecord:
    """Structured fetch failure record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        project: Project display name
        sheet: Sheet name, or "" when the sheet listing itself failed
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Transport or payload error description
    """
    timestamp: str  # ISO8601 UTC
    project: str
    sheet: str
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(project: str, sheet: str, error_type: str, message: str) -> FetchErrorRecord:
        """Create a new FetchErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return FetchErrorRecord(
            timestamp=ts,
            project=project,
            sheet=sheet,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
