from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""Result of one fetch/merge cycle."""

__all__ = [
    "SheetStat",
    "MergeResult",
]


@dataclass(frozen=True)
class SheetStat:
    """Per-sheet fetch statistics."""
    project_name: str
    sheet_name: str
    status: str  # success/failed
    rows: int


@dataclass(frozen=True)
class MergeResult:
    """Merged rows plus the bookkeeping the SUMMARY line needs."""
    rows: list[dict[str, Any]] = field(default_factory=list)
    sheets_total: int = 0
    sheets_failed: int = 0
    elapsed_seconds: float = 0.0
    sheet_stats: list[SheetStat] | None = None

    @property
    def partial(self) -> bool:
        return self.sheets_failed > 0
