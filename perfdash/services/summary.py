from __future__ import annotations

from ..models.fetch_result import MergeResult
from ..models.records import DashboardMetrics

"""SUMMARY line rendering.

Format:
SUMMARY sheets={total} failed={failed} rows={rows} frames={frames}
objects={objects} qc_objects={qc} errors={errors} quality={rate}%
elapsed_sec={elapsed}
"""


def _number(value: float) -> str:
    if value == int(value):
        return str(int(value))
    if abs(value) < 0.01:
        # avoid scientific notation for tiny values
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(value)


def render_summary_line(result: MergeResult, metrics: DashboardMetrics) -> str:
    """Render the closing SUMMARY line of a dashboard run.

    Examples:
        >>> from perfdash.models.fetch_result import MergeResult
        >>> from perfdash.models.records import DashboardMetrics
        >>> render_summary_line(
        ...     MergeResult(rows=[], sheets_total=2, sheets_failed=0, elapsed_seconds=1.0),
        ...     DashboardMetrics(total_frames=3, total_objects=10.0),
        ... )
        'SUMMARY sheets=2 failed=0 rows=0 frames=3 objects=10 qc_objects=0 errors=0 quality=0.00% elapsed_sec=1'
    """
    return (
        f"SUMMARY sheets={result.sheets_total} "
        f"failed={result.sheets_failed} "
        f"rows={len(result.rows)} "
        f"frames={metrics.total_frames} "
        f"objects={_number(metrics.total_objects)} "
        f"qc_objects={_number(metrics.qc_total_objects)} "
        f"errors={_number(metrics.total_errors)} "
        f"quality={metrics.quality_rate_percent:.2f}% "
        f"elapsed_sec={_number(result.elapsed_seconds)}"
    )
