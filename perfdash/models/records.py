from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""Derived record models produced by aggregation and metrics.

All records are read-only projections of one merged row set. They have no
back-reference to the raw rows and are rebuilt wholesale on every refresh.
The ``to_record()`` helpers return the flat upper-case keyed dicts that the
table printer and CSV exporter consume.
"""

__all__ = [
    "SUMMARY_HEADERS",
    "plain_number",
    "QC_HEADERS",
    "SummaryRecord",
    "QCRecord",
    "PerformanceEntry",
    "QualityEntry",
    "Aggregates",
    "DashboardMetrics",
]

SUMMARY_HEADERS = ["NAME", "FRAMECOUNT", "OBJECTCOUNT"]
QC_HEADERS = ["NAME", "OBJECTCOUNT", "ERRORCOUNT"]


def plain_number(value: float) -> int | float:
    """Render integral floats as int so tables do not show a trailing .0."""
    if float(value).is_integer():
        return int(value)
    return value


@dataclass(frozen=True)
class SummaryRecord:
    """Per-identity output: distinct frames and summed objects."""
    name: str
    frame_count: int
    object_count: float

    def to_record(self) -> dict[str, Any]:
        return {
            "NAME": self.name,
            "FRAMECOUNT": self.frame_count,
            "OBJECTCOUNT": plain_number(self.object_count),
        }


@dataclass(frozen=True)
class QCRecord:
    """Per-identity QC accumulators."""
    name: str
    object_count: float
    error_count: float

    def to_record(self) -> dict[str, Any]:
        return {
            "NAME": self.name,
            "OBJECTCOUNT": plain_number(self.object_count),
            "ERRORCOUNT": plain_number(self.error_count),
        }


@dataclass(frozen=True)
class PerformanceEntry:
    name: str
    value: float


@dataclass(frozen=True)
class QualityEntry:
    name: str
    objects: float
    errors: float
    quality: float  # percent, 2 dp


@dataclass(frozen=True)
class Aggregates:
    """All aggregate views computed from one merged row set."""
    annotators: list[SummaryRecord] = field(default_factory=list)
    users: list[SummaryRecord] = field(default_factory=list)
    qc_annotators: list[QCRecord] = field(default_factory=list)
    qc_users: list[QCRecord] = field(default_factory=list)
    combined_performance: list[PerformanceEntry] = field(default_factory=list)
    attendance: list[dict[str, str]] = field(default_factory=list)
    attendance_headers: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class DashboardMetrics:
    """Top-line scalar metrics over production rows."""
    total_frames: int = 0
    total_objects: float = 0.0
    qc_total_objects: float = 0.0
    total_errors: float = 0.0
    quality_rate_percent: float = 0.0

    def as_cards(self) -> list[tuple[str, str]]:
        """Label/value pairs in the order the overview shows them."""
        return [
            ("Total Frames", f"{self.total_frames:,}"),
            ("Total Objects", f"{plain_number(self.total_objects):,}"),
            ("QC Total Objects", f"{plain_number(self.qc_total_objects):,}"),
            ("Total Errors", f"{plain_number(self.total_errors):,}"),
            ("Quality Rate", f"{self.quality_rate_percent:.2f}%" if self.qc_total_objects > 0 else "0%"),
        ]
