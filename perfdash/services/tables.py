from __future__ import annotations

import csv
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.records import plain_number
from ..sheets.keys import normalize_key
from ..sheets.values import cell_text, to_number
from .attendance import ABSENT, HALF_DAY, NOT_RECORDED, PRESENT

"""Table operations for the rendering layer: filtering, totals, CSV export."""

__all__ = [
    "ColumnTotal",
    "filter_records",
    "column_totals",
    "export_filename",
    "export_csv",
    "to_frame",
]

SUMMED_COLUMNS = {"framecount", "objectcount", "errorcount", "numberofobjectannotated"}
ATTENDANCE_VALUES = {PRESENT.upper(), ABSENT.upper(), NOT_RECORDED, HALF_DAY}
EXPORT_CODES = {PRESENT: "P", ABSENT: "L"}
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class ColumnTotal:
    kind: str  # attendance/numeric
    label: str
    value: Any  # number, or {"present", "half", "absent"} counts

    def render(self) -> str:
        if self.kind == "attendance":
            return f"P: {self.value['present']} | H: {self.value['half']} | L: {self.value['absent']}"
        return str(plain_number(self.value))


def _text(value: Any) -> str:
    return cell_text(value) if value is not None else ""


def filter_records(
    records: Sequence[Mapping[str, Any]],
    headers: Sequence[str],
    search: str = "",
    filters: Mapping[str, Sequence[str]] | None = None,
) -> list[Mapping[str, Any]]:
    """Rows matching a free-text search over ``headers`` and per-column value filters.

    An empty filter list for a column accepts every value.
    """
    needle = search.lower()
    active = {col: set(values) for col, values in (filters or {}).items() if values}
    out = []
    for row in records:
        if needle and not any(needle in _text(row.get(h)).lower() for h in headers):
            continue
        if any(_text(row.get(col)) not in values for col, values in active.items()):
            continue
        out.append(row)
    return out


def _is_numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    return not pd.isna(pd.to_numeric(_text(value), errors="coerce"))


def column_totals(headers: Sequence[str], records: Sequence[Mapping[str, Any]]) -> dict[str, ColumnTotal]:
    """Footer totals per column.

    Attendance columns count statuses, known count columns are summed,
    frame id columns count non-empty cells, other numeric columns are summed.
    """
    totals: dict[str, ColumnTotal] = {}
    for header in headers:
        norm = normalize_key(header)
        values = [_text(row.get(header)).upper() for row in records]

        if any(v in ATTENDANCE_VALUES for v in values):
            counts = {
                "present": values.count(PRESENT.upper()),
                "half": values.count(HALF_DAY),
                "absent": values.count(ABSENT.upper()),
            }
            if any(counts.values()):
                totals[header] = ColumnTotal("attendance", "Attendance", counts)
                continue

        if norm in SUMMED_COLUMNS:
            totals[header] = ColumnTotal("numeric", "Sum", sum(to_number(r.get(header)) for r in records))
            continue
        if "videoid" in norm:
            continue
        if "frameid" in norm:
            count = sum(1 for r in records if _text(r.get(header)))
            totals[header] = ColumnTotal("numeric", "Count", count)
            continue

        sample = next((r.get(header) for r in records if _text(r.get(header))), None)
        if sample is not None and _is_numeric(sample):
            totals[header] = ColumnTotal("numeric", "Sum", sum(to_number(r.get(header)) for r in records))
    return totals


def export_filename(title: str, today: date | None = None) -> str:
    today = today or date.today()
    stem = _WHITESPACE.sub("_", title.lower())
    return f"{stem}_{today.isoformat()}.csv"


def to_frame(headers: Sequence[str], records: Sequence[Mapping[str, Any]]) -> pd.DataFrame:
    return pd.DataFrame([{h: row.get(h, "") for h in headers} for row in records], columns=list(headers))


def export_csv(
    path: Path, headers: Sequence[str], records: Sequence[Mapping[str, Any]]
) -> Path | None:
    """Write records as an all-quoted CSV with a GRAND TOTALS footer.

    Attendance statuses are exported as short codes (Present -> P,
    Absent -> L).

    Returns:
        The written path, or None when there are no records
    """
    if not records:
        return None
    totals = column_totals(headers, records)
    body = [
        {h: EXPORT_CODES.get(row.get(h), row.get(h, "")) for h in headers}
        for row in records
    ]
    spacer = {h: "" for h in headers}
    footer = {
        h: ("GRAND TOTALS" if i == 0 else (totals[h].render() if h in totals else ""))
        for i, h in enumerate(headers)
    }
    frame = pd.DataFrame([*body, spacer, footer], columns=list(headers)).fillna("")
    path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(path, index=False, quoting=csv.QUOTE_ALL)
    return path
