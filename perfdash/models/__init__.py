"""Domain models for the performance dashboard.

This package contains the dataclasses shared by the fetch pipeline, the
aggregation services and the CLI.
"""

from .error_record import FetchErrorRecord
from .fetch_result import MergeResult, SheetStat
from .project import Category, Project, SheetRef
from .records import (
    QC_HEADERS,
    SUMMARY_HEADERS,
    Aggregates,
    DashboardMetrics,
    PerformanceEntry,
    QCRecord,
    QualityEntry,
    SummaryRecord,
)

__all__ = [
    # Source models
    "Category",
    "Project",
    "SheetRef",
    # Fetch models
    "FetchErrorRecord",
    "MergeResult",
    "SheetStat",
    # Derived records
    "Aggregates",
    "DashboardMetrics",
    "PerformanceEntry",
    "QCRecord",
    "QualityEntry",
    "SummaryRecord",
    "SUMMARY_HEADERS",
    "QC_HEADERS",
]
