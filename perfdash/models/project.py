from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""Project (endpoint) and sheet reference models.

A Project is a remote spreadsheet-backed data source. Its category decides
which sheets are relevant and which aggregation rules apply to their rows.
"""

__all__ = [
    "Category",
    "Project",
    "SheetRef",
]

SHEET_ID_SEPARATOR = "|"


class Category(str, Enum):
    PRODUCTION = "production"
    HOURLY = "hourly"


@dataclass(frozen=True)
class Project:
    """A configured remote data source."""
    id: str
    name: str
    url: str
    category: Category
    color: str | None = None

    def accepts_sheet(self, sheet_name: str) -> bool:
        """Return True if a sheet of this name belongs to the project's category.

        Hourly projects only expose login sheets (credential sheets excluded);
        production projects expose production and QC sheets.
        """
        low = sheet_name.lower()
        if self.category is Category.HOURLY:
            return "login" in low and "credential" not in low
        return "production" in low or "qc" in low


@dataclass(frozen=True)
class SheetRef:
    """One selectable sheet under a project. Derived, never persisted."""
    project_id: str
    sheet_name: str

    @property
    def id(self) -> str:
        return f"{self.project_id}{SHEET_ID_SEPARATOR}{self.sheet_name}"

    @staticmethod
    def parse(sheet_id: str) -> SheetRef:
        project_id, _, sheet_name = sheet_id.partition(SHEET_ID_SEPARATOR)
        return SheetRef(project_id=project_id, sheet_name=sheet_name)
