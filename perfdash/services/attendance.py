from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from ..sheets.keys import find_key
from ..sheets.values import cell_text, natural_sort_key, sheet_name_to_ordinal, to_number
from .orchestrator import DATE_FIELD, PROJECT_CATEGORY, SHEET_SOURCE, SYNTHETIC_DATE

"""Attendance pivot over hourly login sheets.

Login sheets carry no reliable headers, so each row is read positionally by
``decode_login_row``. Swapping in a header-based decoder only requires
replacing that one function.
"""

__all__ = [
    "PRESENT",
    "HALF_DAY",
    "ABSENT",
    "NOT_RECORDED",
    "DEFAULT_HALF_DAY_HOURS",
    "LoginEntry",
    "AttendanceTable",
    "is_login_row",
    "decode_login_row",
    "attendance_status",
    "legacy_attendance_status",
    "sort_sheet_names",
    "build_attendance",
]

PRESENT = "Present"
HALF_DAY = "P(1/2)"
ABSENT = "Absent"
NOT_RECORDED = "NIL"

DEFAULT_HALF_DAY_HOURS = 5.0

STATUS_RANK = {PRESENT: 3, HALF_DAY: 2, ABSENT: 1}

BASE_HEADERS = ["SNO", "NAME", "EMP CODE"]

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class LoginEntry:
    """One decoded login row."""
    sno: str
    name: str
    emp_code: str
    working_hours: float
    has_login: bool


@dataclass(frozen=True)
class AttendanceTable:
    rows: list[dict[str, str]]
    headers: list[str]


def is_login_row(row: Mapping[str, Any]) -> bool:
    return (
        row.get(PROJECT_CATEGORY) == "hourly"
        and str(row.get(SHEET_SOURCE) or "").lower().endswith("login")
    )


def _source_columns(row: Mapping[str, Any]) -> list[str]:
    """Columns of the source sheet, in sheet order.

    A ``DATE`` column the sheet itself carries keeps its position; only the
    one appended during processing is skipped.
    """
    synthetic_date = row.get(SYNTHETIC_DATE, True)
    return [
        k for k in row
        if not str(k).startswith("__") and not (k == DATE_FIELD and synthetic_date)
    ]


def _column(row: Mapping[str, Any], keys: list[str], index: int) -> Any:
    return row.get(keys[index]) if index < len(keys) else None


def decode_login_row(row: Mapping[str, Any]) -> LoginEntry:
    """Legacy positional decoder for login sheets.

    Column layout: 0 serial number, 1 employee name, 2 employee code (unless
    an explicit code header exists), 3 working hours, 5 login time.
    """
    keys = _source_columns(row)
    code_key = (
        find_key(keys, "Employee Code")
        or find_key(keys, "Emp Code")
        or find_key(keys, "Emp ID")
        or (keys[2] if len(keys) > 2 else None)
    )
    login_time = cell_text(_column(row, keys, 5))
    return LoginEntry(
        sno=cell_text(_column(row, keys, 0)),
        name=cell_text(_column(row, keys, 1)),
        emp_code=cell_text(row.get(code_key)) if code_key is not None else "",
        working_hours=to_number(_column(row, keys, 3)),
        has_login=bool(login_time) and login_time.lower() != "nil",
    )


def attendance_status(entry: LoginEntry, half_day_hours: float = DEFAULT_HALF_DAY_HOURS) -> str:
    """Three-tier status: Absent without a login, half day below the threshold."""
    if not entry.has_login:
        return ABSENT
    return PRESENT if entry.working_hours >= half_day_hours else HALF_DAY


def legacy_attendance_status(entry: LoginEntry) -> str:
    """Two-tier status (login present or not). Superseded by attendance_status."""
    return PRESENT if entry.has_login else ABSENT


def sort_sheet_names(names: Iterable[str]) -> list[str]:
    """Order sheets by the date in their name, then naturally by name."""
    return sorted(set(names), key=lambda s: (sheet_name_to_ordinal(s), natural_sort_key(s)))


def _serial_key(sno: str, name: str) -> tuple[int, int, str]:
    match = _LEADING_INT.match(sno)
    if match:
        return (0, int(match.group(1)), name.lower())
    return (1, 0, name.lower())


def build_attendance(
    rows: Iterable[Mapping[str, Any]], half_day_hours: float = DEFAULT_HALF_DAY_HOURS
) -> AttendanceTable:
    """Pivot login rows into one row per employee and one column per sheet.

    If an employee appears several times in one sheet the best status wins
    (Present > P(1/2) > Absent) regardless of row order. Employees missing
    from a sheet get "NIL", which is distinct from an explicit "Absent".
    """
    employees: dict[str, LoginEntry] = {}
    records: dict[str, dict[str, str]] = {}
    sheets: set[str] = set()

    for row in rows:
        if not is_login_row(row):
            continue
        sheet = str(row.get(SHEET_SOURCE) or "")
        sheets.add(sheet)
        entry = decode_login_row(row)
        if not entry.name or entry.name.lower() == "undefined":
            continue
        status = attendance_status(entry, half_day_hours)
        employees.setdefault(entry.name, entry)
        seen = records.setdefault(entry.name, {})
        current = seen.get(sheet)
        if STATUS_RANK[status] > STATUS_RANK.get(current, 0):
            seen[sheet] = status

    sorted_sheets = sort_sheet_names(sheets)
    ordered = sorted(employees.values(), key=lambda e: _serial_key(e.sno, e.name))
    table: list[dict[str, str]] = []
    for i, entry in enumerate(ordered, start=1):
        out = {"SNO": str(i), "NAME": entry.name, "EMP CODE": entry.emp_code}
        for sheet in sorted_sheets:
            out[sheet] = records[entry.name].get(sheet, NOT_RECORDED)
        table.append(out)
    return AttendanceTable(rows=table, headers=[*BASE_HEADERS, *sorted_sheets])
