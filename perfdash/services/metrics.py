from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from ..models.records import DashboardMetrics
from ..sheets.keys import observed_keys
from ..sheets.values import cell_text, is_valid_qc_name, to_number
from .aggregation import resolve_columns, round_half_up
from .orchestrator import PROJECT_CATEGORY

"""Top-line metrics over production rows."""

__all__ = [
    "quality_rate",
    "summarize",
]


def quality_rate(qc_objects: float, errors: float) -> float:
    """Share of reviewed objects without errors, in percent (2 dp).

    Returns 0.0 when nothing was reviewed.
    """
    if qc_objects <= 0:
        return 0.0
    return round_half_up((qc_objects - errors) / qc_objects * 100)


def summarize(rows: Sequence[Mapping[str, Any]]) -> DashboardMetrics:
    cols = resolve_columns(observed_keys(rows))
    frames: set[str] = set()
    total_objects = 0.0
    qc_objects = 0.0
    total_errors = 0.0

    for row in rows:
        if row.get(PROJECT_CATEGORY) != "production":
            continue
        frame_id = cell_text(row.get(cols.frame)) if cols.frame else ""
        if frame_id:
            frames.add(frame_id)
        objects = to_number(row.get(cols.objects)) if cols.objects else 0.0
        total_objects += objects
        if cols.qc_name and is_valid_qc_name(row.get(cols.qc_name)):
            qc_objects += objects
            total_errors += to_number(row.get(cols.errors)) if cols.errors else 0.0

    return DashboardMetrics(
        total_frames=len(frames),
        total_objects=total_objects,
        qc_total_objects=qc_objects,
        total_errors=total_errors,
        quality_rate_percent=quality_rate(qc_objects, total_errors),
    )
