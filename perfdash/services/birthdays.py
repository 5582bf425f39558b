from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any

import pandas as pd

from ..models.project import Project
from ..sheets.client import SheetsApiError, SheetsClient
from ..sheets.values import cell_text

"""Birthday greeting scan across every configured project."""

__all__ = [
    "birthday_matches",
    "scan_birthdays",
]

logger = logging.getLogger(__name__)

DOB_KEYS = ("DOB", "dob", "Date of Birth")
NAME_KEYS = ("NAME", "name", "Employee Name")
UNKNOWN_NAME = "Someone"


def _first_text(row: Mapping[str, Any], keys: Sequence[str]) -> str:
    for k in keys:
        text = cell_text(row.get(k))
        if text:
            return text
    return ""


def birthday_matches(rows: Sequence[Mapping[str, Any]], today: date) -> list[str]:
    """Names of the rows whose date of birth falls on today's day and month."""
    names = []
    for row in rows:
        dob = _first_text(row, DOB_KEYS)
        if not dob:
            continue
        try:
            born = pd.Timestamp(dob)
        except (ValueError, TypeError, OverflowError):
            continue
        if pd.isna(born) or (born.day, born.month) != (today.day, today.month):
            continue
        names.append(_first_text(row, NAME_KEYS) or UNKNOWN_NAME)
    return names


def scan_birthdays(projects: Sequence[Project], client: SheetsClient, today: date | None = None) -> list[str]:
    """Unique names with a birthday today, from every sheet named "*birthday*"."""
    today = today or date.today()
    found: dict[str, None] = {}
    for project in projects:
        try:
            sheets = [s for s in client.list_sheets(project.url) if "birthday" in s.lower()]
            for sheet in sheets:
                for name in birthday_matches(client.fetch_rows(project.url, sheet), today):
                    found.setdefault(name, None)
        except SheetsApiError as e:
            logger.debug(f"birthday scan skipped project={project.name}: {e}")
    return list(found)
