from __future__ import annotations

import math
import numbers
import re
from datetime import date, datetime, time, timedelta
from typing import Any

import pandas as pd

"""Cell value normalization.

Pure, total functions: none of them raise on bad input. Unparseable times
become None, unparseable dates pass through verbatim, unrecognised sheet
names sort first (ordinal 0).

Spreadsheet sources deliver loosely typed cells: strings, numbers (Google
Sheets encodes a time of day as a fraction of a day), ISO timestamps from the
JSON bridge, or date objects when rows come from pandas.
"""

__all__ = [
    "REFERENCE_YEAR",
    "MISSING_DATE",
    "is_missing",
    "cell_text",
    "to_number",
    "is_valid_qc_name",
    "natural_sort_key",
    "time_to_minutes",
    "normalize_date",
    "sheet_name_to_ordinal",
    "format_ordinal_date",
]

MINUTES_PER_DAY = 24 * 60
EVENING_ROLLOVER_HOUR = 18  # evening entries belong to the next business date
# Only relative order of sheet dates matters; any constant year works.
REFERENCE_YEAR = 2025
MISSING_DATE = "-"

EMPTY_TIME_TOKENS = {"", "n/a", "0", "00:00:00"}
EMPTY_DATE_TOKENS = {"", "nil", "-", "undefined"}
INVALID_QC_NAMES = {"nil", "undefined", "-", "0"}

MONTHS = {
    "JAN": 1, "FEB": 2, "MAR": 3, "APR": 4, "MAY": 5, "JUN": 6,
    "JUL": 7, "AUG": 8, "SEP": 9, "OCT": 10, "NOV": 11, "DEC": 12,
}

_TIME_PATTERN = re.compile(r"(\d{1,2}):(\d{2})(?::(\d{2}))?\s*(AM|PM)?", re.IGNORECASE)
_ISO_PREFIX = re.compile(r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2})")
_NUMERIC = re.compile(r"[+-]?\d+(\.\d+)?")
_NUMERIC_PREFIX = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)")
_DAY_MONTH = re.compile(r"(\d+)(?:ST|ND|RD|TH)?\s+([A-Z]{3})")
_MONTH_DAY = re.compile(r"([A-Z]{3})\s*-?\s*(\d+)")
_DIGITS = re.compile(r"(\d+)")
_EPOCH = datetime(1970, 1, 1)


def is_missing(value: Any) -> bool:
    if value is None or value is pd.NaT:
        return True
    return isinstance(value, float) and math.isnan(value)


def cell_text(value: Any) -> str:
    """Trimmed text of a cell; integral floats lose their ``.0``."""
    if is_missing(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def to_number(value: Any) -> float:
    """Numeric coercion where missing or non-numeric cells count as 0.

    Text with a numeric prefix keeps that prefix: "8:30" -> 8, "5 objects" -> 5.
    """
    if is_missing(value) or isinstance(value, bool):
        return 0.0
    if isinstance(value, numbers.Real):
        result = float(value)
    else:
        text = str(value).strip()
        parsed = pd.to_numeric(text, errors="coerce")
        if pd.isna(parsed):
            prefix = _NUMERIC_PREFIX.match(text)
            if not prefix:
                return 0.0
            parsed = prefix.group(0)
        result = float(parsed)
    return result if math.isfinite(result) else 0.0


def is_valid_qc_name(value: Any) -> bool:
    text = cell_text(value)
    return bool(text) and text.lower() not in INVALID_QC_NAMES


def natural_sort_key(text: str) -> list[Any]:
    """Numeric-aware sort key: "SHEET 2" sorts before "SHEET 10"."""
    return [int(part) if part.isdigit() else part.lower() for part in _DIGITS.split(text)]


def time_to_minutes(value: Any) -> int | None:
    """Convert a time-of-day cell to minutes since midnight.

    Accepts date/time objects, day fractions in (0, 1) and strings such as
    "9:05", "09:05:00" or "6:30 PM".

    Returns:
        Minutes in [0, 1439], or None when the value carries no usable time
    """
    if is_missing(value) or isinstance(value, bool):
        return None
    if isinstance(value, (datetime, time)):
        return value.hour * 60 + value.minute
    if isinstance(value, numbers.Real):
        if value <= 0 or value >= 1:
            return None
        return min(math.floor(value * MINUTES_PER_DAY + 0.5), MINUTES_PER_DAY - 1)

    text = str(value).strip()
    if text.lower() in EMPTY_TIME_TOKENS:
        return None
    match = _TIME_PATTERN.search(text)
    if not match:
        return None
    hours = int(match.group(1))
    minutes = int(match.group(2))
    meridiem = (match.group(4) or "").upper()
    if meridiem == "PM" and hours < 12:
        hours += 12
    if meridiem == "AM" and hours == 12:
        hours = 0
    if hours > 23 or minutes > 59:
        return None
    return hours * 60 + minutes


def _format_date(value: date) -> str:
    return f"{value.year:04d}/{value.month:02d}/{value.day:02d}"


def normalize_date(value: Any) -> str:
    """Normalize a date cell to ``YYYY/MM/DD``.

    ISO timestamps at or after 18:00 are attributed to the following day.
    Values that cannot be read as a plausible calendar date are returned
    unchanged (trimmed) so that no source data is lost.
    """
    if is_missing(value):
        return ""
    if isinstance(value, (datetime, date)):
        text = value.isoformat()
    else:
        text = str(value).strip()
    if text.lower() in EMPTY_DATE_TOKENS:
        return ""

    match = _ISO_PREFIX.match(text)
    if match:
        year, month, day, hour = (int(match.group(i)) for i in range(1, 5))
        try:
            parsed = date(year, month, day)
            if hour >= EVENING_ROLLOVER_HOUR:
                parsed += timedelta(days=1)
            return _format_date(parsed)
        except (ValueError, OverflowError):
            pass

    # serial numbers and words like "today" are not calendar dates here
    if _NUMERIC.fullmatch(text) or not any(ch.isdigit() for ch in text):
        return text
    try:
        stamp = pd.Timestamp(text)
    except (ValueError, TypeError, OverflowError):
        return text
    if pd.isna(stamp):
        return text
    if 1900 < stamp.year < 2100:
        return _format_date(stamp)
    return text


def _month_day_ordinal(month: int, day: int) -> int:
    try:
        moment = datetime(REFERENCE_YEAR, month, 1) + timedelta(days=day - 1)
    except OverflowError:
        return 0
    return int((moment - _EPOCH).total_seconds()) * 1000


def sheet_name_to_ordinal(sheet_name: str) -> int:
    """Sortable timestamp (ms) from a sheet name such as "1ST SEP" or "SEP-1".

    Returns 0 when the name carries no recognisable day and month.
    """
    name = str(sheet_name or "").upper()
    for match in _DAY_MONTH.finditer(name):
        month = MONTHS.get(match.group(2))
        if month:
            return _month_day_ordinal(month, int(match.group(1)))
    for match in _MONTH_DAY.finditer(name):
        month = MONTHS.get(match.group(1))
        if month:
            return _month_day_ordinal(month, int(match.group(2)))
    return 0


def format_ordinal_date(ordinal: int) -> str:
    if not ordinal:
        return MISSING_DATE
    return _format_date(_EPOCH + timedelta(milliseconds=ordinal))
