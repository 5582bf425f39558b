from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..logging.error_log import FetchErrorLog
from ..models.fetch_result import MergeResult
from ..models.project import Project, SheetRef
from ..sheets.client import SheetsClient
from .discovery import discover_sheets
from .orchestrator import DEFAULT_MAX_WORKERS, merge_selection

"""Explicit dashboard state.

Selection state and the merged rows live in one struct that is passed to the
fetch and aggregation functions. Each refresh runs as a numbered cycle; a
cycle that finishes after a newer one has started is discarded so that a slow
stale fetch never overwrites the results of the current selection.
"""

__all__ = [
    "DashboardState",
]

logger = logging.getLogger(__name__)


@dataclass
class DashboardState:
    projects: dict[str, Project] = field(default_factory=dict)
    selected_project_ids: list[str] = field(default_factory=list)
    available_sheets: list[SheetRef] = field(default_factory=list)
    selected_sheets: list[SheetRef] = field(default_factory=list)
    result: MergeResult = field(default_factory=MergeResult)
    loading: bool = False
    cycle: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)

    @classmethod
    def from_projects(cls, projects: Iterable[Project]) -> DashboardState:
        return cls(projects={p.id: p for p in projects})

    @property
    def rows(self) -> list[dict[str, Any]]:
        return self.result.rows

    @property
    def selected_projects(self) -> list[Project]:
        return [self.projects[pid] for pid in self.selected_project_ids if pid in self.projects]

    def select_projects(self, project_ids: Sequence[str]) -> None:
        """Replace the project selection and drop sheets of deselected projects."""
        self.selected_project_ids = [pid for pid in dict.fromkeys(project_ids) if pid in self.projects]
        keep = set(self.selected_project_ids)
        self.selected_sheets = [s for s in self.selected_sheets if s.project_id in keep]
        self.available_sheets = [s for s in self.available_sheets if s.project_id in keep]
        if not self.selected_project_ids:
            self.result = MergeResult()

    def select_sheets(self, sheets: Sequence[SheetRef]) -> None:
        keep = set(self.selected_project_ids)
        self.selected_sheets = [s for s in dict.fromkeys(sheets) if s.project_id in keep]

    def refresh_sheets(
        self,
        client: SheetsClient,
        *,
        max_workers: int = DEFAULT_MAX_WORKERS,
        error_log: FetchErrorLog | None = None,
    ) -> list[SheetRef]:
        self.available_sheets = discover_sheets(
            self.selected_projects, client, max_workers=max_workers, error_log=error_log
        )
        return self.available_sheets

    def begin_cycle(self) -> int:
        """Start a refresh cycle and return its token."""
        with self._lock:
            self.cycle += 1
            self.loading = True
            return self.cycle

    def commit_cycle(self, token: int, result: MergeResult) -> bool:
        """Store a cycle's result unless a newer cycle has started since.

        Returns:
            True if the result was committed, False if it was stale
        """
        with self._lock:
            if token != self.cycle:
                logger.debug(f"discarding stale cycle {token} (current {self.cycle})")
                return False
            self.result = result
            self.loading = False
            return True

    def refresh(
        self,
        client: SheetsClient,
        *,
        max_workers: int = DEFAULT_MAX_WORKERS,
        error_log: FetchErrorLog | None = None,
    ) -> bool:
        """Run one fetch/merge cycle for the current sheet selection."""
        token = self.begin_cycle()
        if not self.selected_sheets:
            return self.commit_cycle(token, MergeResult())
        selection = list(self.selected_sheets)
        result = merge_selection(
            selection, self.projects, client, max_workers=max_workers, error_log=error_log
        )
        return self.commit_cycle(token, result)
