from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from ..models.records import (
    Aggregates,
    PerformanceEntry,
    QCRecord,
    QualityEntry,
    SummaryRecord,
)
from ..sheets.keys import find_key, observed_keys
from ..sheets.values import cell_text, is_valid_qc_name, to_number
from .attendance import DEFAULT_HALF_DAY_HOURS, build_attendance
from .identity import IdentityCanonicalizer
from .orchestrator import PROJECT_CATEGORY, SHEET_SOURCE

"""Aggregation of merged sheet rows into dashboard views.

``aggregate`` is a pure function of the full merged row set: every call
starts from empty accumulators.
"""

__all__ = [
    "ColumnKeys",
    "resolve_columns",
    "aggregate",
    "top_performers",
    "top_quality",
    "raw_headers",
    "round_half_up",
]


@dataclass(frozen=True)
class ColumnKeys:
    """Observed column names for the canonical production fields."""
    annotator: str | None
    user: str | None
    frame: str | None
    objects: str | None
    qc_name: str | None
    errors: str | None


def resolve_columns(keys: Sequence[str]) -> ColumnKeys:
    return ColumnKeys(
        annotator=find_key(keys, "Annotator Name"),
        user=find_key(keys, "UserName"),
        frame=find_key(keys, "Frame ID"),
        objects=find_key(keys, "Number of Object Annotated"),
        qc_name=find_key(keys, "Internal QC Name"),
        errors=find_key(keys, "Internal Polygon Error Count"),
    )


def _cell(row: Mapping[str, Any], key: str | None) -> Any:
    return row.get(key) if key is not None else None


def round_half_up(value: float, ndigits: int = 2) -> float:
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


@dataclass
class _Output:
    frames: set[str] = field(default_factory=set)
    objects: float = 0.0


@dataclass
class _QC:
    objects: float = 0.0
    errors: float = 0.0


def aggregate(
    rows: Sequence[Mapping[str, Any]],
    identity: IdentityCanonicalizer | None = None,
    half_day_hours: float = DEFAULT_HALF_DAY_HOURS,
) -> Aggregates:
    """Compute every aggregate view from the merged rows.

    Production rows feed the annotator, user, QC and performance views.
    Hourly login rows feed the attendance pivot.

    Args:
        rows: Merged, tagged rows of one fetch cycle
        identity: Identity canonicalizer applied to annotator and user names
        half_day_hours: Working hours below which a login counts as half day

    Returns:
        Aggregates with records in first-seen order
    """
    if not rows:
        return Aggregates()
    identity = identity or IdentityCanonicalizer()
    cols = resolve_columns(observed_keys(rows))

    annotators: dict[str, _Output] = {}
    users: dict[str, _Output] = {}
    qc_annotators: dict[str, _QC] = {}
    qc_users: dict[str, _QC] = {}
    performance: dict[str, float] = {}

    for row in rows:
        if row.get(PROJECT_CATEGORY) != "production":
            continue
        from_qc_sheet = "qc" in str(row.get(SHEET_SOURCE) or "").lower()

        user = identity.canonical(_cell(row, cols.user))
        annotator = identity.canonical(_cell(row, cols.annotator)) or user
        frame_id = cell_text(_cell(row, cols.frame))
        objects = to_number(_cell(row, cols.objects))
        errors = to_number(_cell(row, cols.errors))
        # QC review sheets repeat production rows; count them once
        attribute_qc = is_valid_qc_name(_cell(row, cols.qc_name)) and not from_qc_sheet

        for name, outputs, qc_map in ((annotator, annotators, qc_annotators), (user, users, qc_users)):
            if not name:
                continue
            acc = outputs.setdefault(name, _Output())
            if frame_id:
                acc.frames.add(frame_id)
            acc.objects += objects
            if attribute_qc:
                qc = qc_map.setdefault(name, _QC())
                qc.objects += objects
                qc.errors += errors

        primary = annotator or user
        if primary:
            performance[primary] = performance.get(primary, 0.0) + objects

    attendance = build_attendance(rows, half_day_hours)
    display = identity.display
    return Aggregates(
        annotators=[SummaryRecord(n, len(a.frames), a.objects) for n, a in annotators.items()],
        users=[SummaryRecord(display(n), len(a.frames), a.objects) for n, a in users.items()],
        qc_annotators=[QCRecord(n, q.objects, q.errors) for n, q in qc_annotators.items()],
        qc_users=[QCRecord(display(n), q.objects, q.errors) for n, q in qc_users.items()],
        combined_performance=[PerformanceEntry(n, v) for n, v in performance.items()],
        attendance=attendance.rows,
        attendance_headers=attendance.headers,
    )


def top_performers(entries: Iterable[PerformanceEntry], limit: int = 5) -> list[PerformanceEntry]:
    return sorted(entries, key=lambda e: e.value, reverse=True)[:limit]


def top_quality(records: Iterable[QCRecord], limit: int = 3) -> list[QualityEntry]:
    """Best QC quality rates among identities with reviewed objects."""
    ranked = [
        QualityEntry(
            name=r.name,
            objects=r.object_count,
            errors=r.error_count,
            quality=round_half_up((r.object_count - r.error_count) / r.object_count * 100),
        )
        for r in records
        if r.object_count > 0
    ]
    return sorted(ranked, key=lambda q: q.quality, reverse=True)[:limit]


def raw_headers(rows: Iterable[Mapping[str, Any]]) -> list[str]:
    """Headers for the raw production view, provenance tags excluded."""
    production = [r for r in rows if r.get(PROJECT_CATEGORY) == "production"]
    return [k for k in observed_keys(production) if not str(k).startswith("__")]
