from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

from ..logging.error_log import FetchErrorLog
from ..models.error_record import FetchErrorRecord
from ..models.project import Project, SheetRef
from ..sheets.client import SheetsApiError, SheetsClient
from .orchestrator import DEFAULT_MAX_WORKERS

"""Sheet discovery for the selected projects.

Only sheets whose names match the project's category pattern are offered for
selection (see ``Project.accepts_sheet``).
"""

__all__ = [
    "list_project_sheets",
    "discover_sheets",
]

logger = logging.getLogger(__name__)


def list_project_sheets(
    client: SheetsClient, project: Project, error_log: FetchErrorLog | None = None
) -> list[str]:
    """List a project's sheet names; a failed listing yields no sheets."""
    try:
        return client.list_sheets(project.url)
    except SheetsApiError as e:
        logger.warning(f"sheet listing failed project={project.name}: {e}")
        if error_log is not None:
            error_log.append(FetchErrorRecord.create(project.name, "", e.error_type, str(e)))
        return []


def discover_sheets(
    projects: Sequence[Project],
    client: SheetsClient,
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
    error_log: FetchErrorLog | None = None,
) -> list[SheetRef]:
    """Return the category-matching sheets of every project, in project order."""
    if not projects:
        return []
    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        listings = list(executor.map(lambda p: list_project_sheets(client, p, error_log), projects))

    refs: list[SheetRef] = []
    for project, names in zip(projects, listings, strict=True):
        matched = [SheetRef(project.id, name) for name in names if project.accepts_sheet(name)]
        logger.debug(f"project={project.name} sheets={len(names)} matched={len(matched)}")
        refs.extend(matched)
    return refs
