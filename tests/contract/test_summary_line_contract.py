from __future__ import annotations

import re

from perfdash.models.fetch_result import MergeResult
from perfdash.models.records import DashboardMetrics
from perfdash.services.summary import render_summary_line

SUMMARY_PATTERN = re.compile(
    r"^SUMMARY sheets=\d+ failed=\d+ rows=\d+ frames=\d+ objects=[\d.]+ qc_objects=[\d.]+ "
    r"errors=[\d.]+ quality=\d+\.\d{2}% elapsed_sec=[\d.]+$"
)


def test_summary_line_format():
    line = render_summary_line(
        MergeResult(rows=[{}] * 7, sheets_total=4, sheets_failed=1, elapsed_seconds=0.25),
        DashboardMetrics(
            total_frames=3, total_objects=22.0, qc_total_objects=19.0, total_errors=6.0, quality_rate_percent=68.42
        ),
    )
    assert SUMMARY_PATTERN.match(line)
    assert line == (
        "SUMMARY sheets=4 failed=1 rows=7 frames=3 objects=22 qc_objects=19 errors=6 quality=68.42% elapsed_sec=0.25"
    )


def test_summary_line_empty_run():
    line = render_summary_line(MergeResult(), DashboardMetrics())
    assert SUMMARY_PATTERN.match(line)
    assert "quality=0.00%" in line


def test_summary_line_fractional_objects():
    line = render_summary_line(MergeResult(), DashboardMetrics(total_objects=2.5))
    assert "objects=2.5 " in line
