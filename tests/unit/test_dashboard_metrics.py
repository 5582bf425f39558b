from __future__ import annotations

from perfdash.models.records import DashboardMetrics
from perfdash.services.metrics import quality_rate, summarize
from perfdash.services.orchestrator import PROJECT_CATEGORY, SHEET_SOURCE


def _row(frame, objects, qc="", errors="", category="production"):
    return {
        "Frame ID": frame,
        "Number of Object Annotated": objects,
        "Internal QC Name": qc,
        "Internal Polygon Error Count": errors,
        PROJECT_CATEGORY: category,
        SHEET_SOURCE: "Production1",
    }


def test_quality_rate_zero_when_nothing_reviewed():
    assert quality_rate(0, 0) == 0.0
    assert quality_rate(0, 5) == 0.0


def test_quality_rate_rounds_half_up():
    assert quality_rate(10, 2) == 80.0
    assert quality_rate(3, 1) == 66.67
    assert quality_rate(19, 6) == 68.42


def test_summarize_production_rows():
    rows = [
        _row("F1", "5", qc="Carol", errors="1"),
        _row("F1", "3"),
        _row("F2", "10", qc="Carol", errors="2"),
        _row("F9", "100", qc="Carol", errors="50", category="hourly"),
    ]
    metrics = summarize(rows)
    assert metrics == DashboardMetrics(
        total_frames=2,
        total_objects=18.0,
        qc_total_objects=15.0,
        total_errors=3.0,
        quality_rate_percent=80.0,
    )


def test_summarize_without_qc_reports_zero_quality():
    metrics = summarize([_row("F1", "5", qc="nil", errors="3")])
    assert metrics.qc_total_objects == 0.0
    assert metrics.total_errors == 0.0
    assert metrics.quality_rate_percent == 0.0
    assert dict(metrics.as_cards())["Quality Rate"] == "0%"


def test_summarize_empty():
    assert summarize([]) == DashboardMetrics()


def test_as_cards_formatting():
    cards = DashboardMetrics(
        total_frames=1234, total_objects=2500.0, qc_total_objects=10.0, total_errors=2.5, quality_rate_percent=75.0
    ).as_cards()
    assert cards == [
        ("Total Frames", "1,234"),
        ("Total Objects", "2,500"),
        ("QC Total Objects", "10"),
        ("Total Errors", "2.5"),
        ("Quality Rate", "75.00%"),
    ]
