from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from datetime import UTC, datetime
from typing import Any

from ..logging.error_log import FetchErrorLog
from ..models.error_record import FetchErrorRecord
from ..models.fetch_result import MergeResult, SheetStat
from ..models.project import Project, SheetRef
from ..sheets.client import SheetsApiError, SheetsClient
from ..sheets.keys import find_key
from ..sheets.values import (
    MISSING_DATE,
    format_ordinal_date,
    normalize_date,
    sheet_name_to_ordinal,
)
from .progress import FetchProgress

"""Fetch and merge orchestration.

One merge cycle fetches every selected sheet concurrently, waits for all of
them, and concatenates the per-sheet batches into one flat row list. Each row
is tagged with its provenance and a canonical ``DATE``.

A sheet that cannot be fetched contributes zero rows; the failure is logged
and recorded but never aborts the cycle.
"""

__all__ = [
    "DATE_FIELD",
    "PROJECT_SOURCE",
    "PROJECT_CATEGORY",
    "SHEET_SOURCE",
    "SYNTHETIC_DATE",
    "DEFAULT_MAX_WORKERS",
    "group_by_project",
    "resolve_sheet_date",
    "process_sheet_rows",
    "merge_selection",
]

logger = logging.getLogger(__name__)

DATE_FIELD = "DATE"
PROJECT_SOURCE = "__projectSource"
PROJECT_CATEGORY = "__projectCategory"
SHEET_SOURCE = "__sheetSource"
# True when DATE was added by processing rather than read from the sheet
SYNTHETIC_DATE = "__syntheticDate"

DEFAULT_MAX_WORKERS = 8


def group_by_project(
    selection: Sequence[SheetRef], projects: Mapping[str, Project]
) -> dict[str, list[str]]:
    """Group selected sheets by project id, preserving selection order.

    Duplicate refs are dropped. Refs pointing at unknown projects are skipped.
    """
    groups: dict[str, list[str]] = {}
    for ref in selection:
        if ref.project_id not in projects:
            logger.warning(f"unknown project '{ref.project_id}' for sheet '{ref.sheet_name}' (skipped)")
            continue
        sheets = groups.setdefault(ref.project_id, [])
        if ref.sheet_name not in sheets:
            sheets.append(ref.sheet_name)
    return groups


def resolve_sheet_date(rows: Sequence[Mapping[str, Any]], date_key: str | None, sheet_name: str) -> str:
    """Sheet-level fallback date.

    The first row whose date column normalizes to a non-empty value wins;
    otherwise the date is read from the sheet name ("1ST SEP").
    """
    if date_key is not None:
        for row in rows:
            normalized = normalize_date(row.get(date_key))
            if normalized:
                return normalized
    ordinal = sheet_name_to_ordinal(sheet_name)
    if ordinal > 0:
        return format_ordinal_date(ordinal)
    return MISSING_DATE


def process_sheet_rows(
    rows: Sequence[Mapping[str, Any]], project: Project, sheet_name: str
) -> list[dict[str, Any]]:
    """Normalize dates and tag provenance for the rows of one sheet.

    Rows without a date of their own inherit the sheet-level fallback date,
    which may come from a sibling row further down the sheet.
    """
    headers = list(rows[0].keys()) if rows else []
    date_key = find_key(headers, "Date")
    if date_key is None and len(headers) > 2:
        date_key = headers[2]
    sheet_date = resolve_sheet_date(rows, date_key, sheet_name)

    processed: list[dict[str, Any]] = []
    for row in rows:
        out: dict[str, Any] = {}
        row_date = ""
        for key, value in row.items():
            if key == date_key or "date" in str(key).lower():
                normalized = normalize_date(value)
                if normalized:
                    value = normalized
                    row_date = normalized
            out[key] = value
        out[DATE_FIELD] = row_date or sheet_date
        out[PROJECT_SOURCE] = project.name
        out[PROJECT_CATEGORY] = project.category.value
        out[SHEET_SOURCE] = sheet_name
        out[SYNTHETIC_DATE] = DATE_FIELD not in row
        processed.append(out)
    return processed


def _fetch_sheet(client: SheetsClient, project: Project, sheet_name: str) -> list[dict[str, Any]]:
    rows = client.fetch_rows(project.url, sheet_name)
    return process_sheet_rows(rows, project, sheet_name)


def merge_selection(
    selection: Sequence[SheetRef],
    projects: Mapping[str, Project],
    client: SheetsClient,
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
    error_log: FetchErrorLog | None = None,
) -> MergeResult:
    """Fetch every selected sheet concurrently and merge the rows.

    Args:
        selection: Selected sheets
        projects: Project catalogue keyed by id
        client: API client shared by the worker threads
        max_workers: Thread pool size
        error_log: Optional buffer receiving one record per failed sheet

    Returns:
        MergeResult with the concatenated rows (selection order) and stats
    """
    start_time = datetime.now(UTC)
    groups = group_by_project(selection, projects)
    jobs = [(projects[pid], sheet) for pid, sheets in groups.items() for sheet in sheets]

    if not jobs:
        return MergeResult(rows=[], sheets_total=0, sheets_failed=0, elapsed_seconds=0.0, sheet_stats=[])

    batches: list[list[dict[str, Any]]] = [[] for _ in jobs]
    stats: list[SheetStat | None] = [None] * len(jobs)
    failed = 0

    with FetchProgress(len(jobs)) as progress, ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        future_to_index: dict[Future[list[dict[str, Any]]], int] = {
            executor.submit(_fetch_sheet, client, project, sheet): i
            for i, (project, sheet) in enumerate(jobs)
        }
        for future in as_completed(future_to_index):
            i = future_to_index[future]
            project, sheet = jobs[i]
            try:
                batches[i] = future.result()
                status = "success"
            except SheetsApiError as e:
                failed += 1
                status = "failed"
                logger.warning(f"fetch failed project={project.name} sheet={sheet}: {e}")
                if error_log is not None:
                    error_log.append(FetchErrorRecord.create(project.name, sheet, e.error_type, str(e)))
            except Exception as e:
                failed += 1
                status = "failed"
                logger.warning(f"processing failed project={project.name} sheet={sheet}: {e}")
                if error_log is not None:
                    error_log.append(
                        FetchErrorRecord.create(project.name, sheet, "PROCESSING_ERROR", str(e))
                    )
            stats[i] = SheetStat(
                project_name=project.name,
                sheet_name=sheet,
                status=status,
                rows=len(batches[i]),
            )
            logger.debug(f"sheet done project={project.name} sheet={sheet} status={status} rows={len(batches[i])}")
            progress.sheet_done(sheet, success=(status == "success"))

    merged = [row for batch in batches for row in batch]
    elapsed = (datetime.now(UTC) - start_time).total_seconds()
    logger.info(f"merged sheets={len(jobs)} failed={failed} rows={len(merged)}")
    return MergeResult(
        rows=merged,
        sheets_total=len(jobs),
        sheets_failed=failed,
        elapsed_seconds=elapsed,
        sheet_stats=[s for s in stats if s is not None],
    )
