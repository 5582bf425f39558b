from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import pandas as pd
from dotenv import load_dotenv

from perfdash.config.loader import DEFAULT_CONFIG_PATH, ConfigError, DashboardConfig, load_config
from perfdash.config.registry import ProjectRegistry, RegistryError
from perfdash.logging.error_log import FetchErrorLog
from perfdash.logging.init import log_summary, setup_logging
from perfdash.models.records import QC_HEADERS, SUMMARY_HEADERS, Aggregates, DashboardMetrics
from perfdash.services.aggregation import aggregate, raw_headers, top_performers, top_quality
from perfdash.services.birthdays import scan_birthdays
from perfdash.services.identity import IdentityCanonicalizer
from perfdash.services.metrics import summarize
from perfdash.services.orchestrator import PROJECT_CATEGORY
from perfdash.services.session import DashboardState
from perfdash.services.summary import render_summary_line
from perfdash.services.tables import export_csv, filter_records, to_frame
from perfdash.sheets.client import SheetsClient

"""CLI entrypoint.

Flow:
- Load config and credentials (.env)
- Project add/update/delete commands edit the config and exit
- Log in, select projects, discover their sheets
- Fetch and merge the selected sheets, aggregate, print one view
- Optionally export the view as CSV, then print the SUMMARY line
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2

USERNAME_ENV = "PERFDASH_USERNAME"
PASSWORD_ENV = "PERFDASH_PASSWORD"

VIEWS = ("overview", "raw", "annotator", "username", "qc-annotator", "qc-user", "attendance")


def _load_env_file(path: Path, override: bool = False) -> None:
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Annotation performance dashboard")
    p.add_argument("--config", default=str(DEFAULT_CONFIG_PATH), help="Path to dashboard YAML config")
    p.add_argument("--project", action="append", help="Project id to include (repeatable, default: all)")
    p.add_argument("--sheet", action="append", help="Sheet name to include (repeatable, default: all matching)")
    p.add_argument("--list-sheets", action="store_true", help="List selectable sheets then exit")
    p.add_argument("--view", choices=VIEWS, default="overview", help="View to print")
    p.add_argument("--search", default="", help="Only keep view rows containing this text")
    p.add_argument("--export", metavar="PATH", help="Export the printed view as CSV")
    p.add_argument("--birthdays", action="store_true", help="Scan birthday sheets of all projects")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")

    g = p.add_argument_group("project registry")
    g.add_argument("--add-project", nargs=3, metavar=("NAME", "URL", "CATEGORY"), help="Add a project to the config")
    g.add_argument("--update-project", metavar="ID", help="Update the project with this id (see --set)")
    g.add_argument(
        "--set",
        action="append",
        default=[],
        metavar="FIELD=VALUE",
        help="Field change for --update-project: name, url, category or color (repeatable)",
    )
    g.add_argument("--delete-project", metavar="ID", help="Delete the project with this id")
    return p.parse_args(argv)


def _parse_changes(pairs: Sequence[str]) -> dict[str, str]:
    changes: dict[str, str] = {}
    for pair in pairs:
        field, sep, value = pair.partition("=")
        if not sep or not field.strip():
            raise RegistryError(f"expected FIELD=VALUE, got: {pair}")
        changes[field.strip()] = value.strip()
    return changes


def _edit_projects(args: argparse.Namespace, logger: logging.Logger) -> int:
    """Apply one registry command to the config file."""
    try:
        registry = ProjectRegistry(Path(args.config))
        if args.add_project:
            name, url, category = args.add_project
            project = registry.add(name, url, category)
            action = "added"
        elif args.update_project:
            changes = _parse_changes(args.set)
            if not changes:
                raise RegistryError("--update-project needs at least one --set FIELD=VALUE")
            project = registry.update(args.update_project, **changes)
            action = "updated"
        else:
            project = registry.get(args.delete_project)
            registry.delete(project.id)
            action = "deleted"
        path = registry.save()
    except (RegistryError, ConfigError) as e:
        logger.error(f"registry: {e}")
        return EXIT_FATAL
    logger.info(f"project {action} id={project.id} name={project.name} category={project.category.value} config={path}")
    return EXIT_SUCCESS_ALL


def _authenticate(client: SheetsClient, cfg: DashboardConfig, logger: logging.Logger) -> bool:
    username = os.getenv(USERNAME_ENV)
    password = os.getenv(PASSWORD_ENV)
    if not username and not password:
        logger.debug("no credentials set -> login skipped")
        return True
    result = client.login(cfg.api_url, username or "", password or "")
    if not result.success:
        logger.error(f"login: {result.message or 'Invalid credentials'}")
        return False
    logger.info(f"logged in as {username}")
    return True


def view_table(
    view: str,
    rows: Sequence[Mapping[str, Any]],
    aggregates: Aggregates,
    metrics: DashboardMetrics,
) -> tuple[list[str], list[Mapping[str, Any]]]:
    """Headers and flat records for one dashboard view."""
    if view == "raw":
        production = [r for r in rows if r.get(PROJECT_CATEGORY) == "production"]
        return raw_headers(rows), production
    if view == "annotator":
        return SUMMARY_HEADERS, [r.to_record() for r in aggregates.annotators]
    if view == "username":
        return SUMMARY_HEADERS, [r.to_record() for r in aggregates.users]
    if view == "qc-annotator":
        return QC_HEADERS, [r.to_record() for r in aggregates.qc_annotators]
    if view == "qc-user":
        return QC_HEADERS, [r.to_record() for r in aggregates.qc_users]
    if view == "attendance":
        return aggregates.attendance_headers, aggregates.attendance
    return ["METRIC", "VALUE"], [{"METRIC": k, "VALUE": v} for k, v in metrics.as_cards()]


def _print_table(title: str, headers: Sequence[str], records: Sequence[Mapping[str, Any]]) -> None:
    print(f"== {title} ({len(records)} rows)")
    if not records:
        return
    with pd.option_context("display.max_rows", None, "display.max_columns", None, "display.width", 200):
        print(to_frame(headers, records).to_string(index=False))


def _print_overview(aggregates: Aggregates) -> None:
    performers = top_performers(aggregates.combined_performance)
    _print_table("Top performers", ["NAME", "OBJECTS"], [{"NAME": e.name, "OBJECTS": e.value} for e in performers])
    quality = top_quality(aggregates.qc_users or aggregates.qc_annotators)
    _print_table(
        "Top quality",
        ["NAME", "OBJECTS", "ERRORS", "QUALITY"],
        [{"NAME": q.name, "OBJECTS": q.objects, "ERRORS": q.errors, "QUALITY": f"{q.quality:.2f}%"} for q in quality],
    )


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    logger = setup_logging(debug=args.debug)
    logger.debug("debug mode enabled")
    _load_env_file(Path(".env"))

    if args.add_project or args.update_project or args.delete_project:
        return _edit_projects(args, logger)

    try:
        cfg = load_config(Path(args.config))
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    client = SheetsClient(timeout=cfg.fetch.timeout_seconds)
    if not _authenticate(client, cfg, logger):
        return EXIT_FATAL

    if args.birthdays:
        names = scan_birthdays(cfg.projects, client)
        if names:
            logger.info(f"Happy Birthday! {', '.join(names)}")

    state = DashboardState.from_projects(cfg.projects)
    requested = args.project or [p.id for p in cfg.projects]
    unknown = [pid for pid in requested if pid not in state.projects]
    if unknown:
        logger.warning(f"unknown project ids ignored: {unknown}")
    state.select_projects(requested)
    if not state.selected_project_ids:
        logger.error("no projects selected")
        return EXIT_FATAL

    error_log = FetchErrorLog()
    workers = cfg.fetch.max_workers
    available = state.refresh_sheets(client, max_workers=workers, error_log=error_log)

    if args.list_sheets:
        for ref in available:
            print(f"{state.projects[ref.project_id].name}\t{ref.sheet_name}")
        error_log.flush()
        return EXIT_SUCCESS_ALL

    wanted = set(args.sheet or [])
    state.select_sheets([s for s in available if not wanted or s.sheet_name in wanted])
    logger.info(f"projects={len(state.selected_project_ids)} sheets={len(state.selected_sheets)}")
    state.refresh(client, max_workers=workers, error_log=error_log)
    result = state.result

    aggregates = aggregate(state.rows, IdentityCanonicalizer(cfg.identity_domain), cfg.half_day_hours)
    metrics = summarize(state.rows)

    headers, records = view_table(args.view, state.rows, aggregates, metrics)
    if args.search:
        records = filter_records(records, headers, args.search)
    _print_table(args.view, headers, records)
    if args.view == "overview":
        _print_overview(aggregates)

    if args.export:
        written = export_csv(Path(args.export), headers, records)
        if written is None:
            logger.warning("export skipped: view is empty")
        else:
            logger.info(f"exported {len(records)} rows to {written}")

    failures = len(error_log)
    log_path = error_log.flush()
    if log_path is not None:
        logger.warning(f"{failures} fetch errors written to {log_path}")

    summary_line = render_summary_line(result, metrics)
    log_summary(summary_line.removeprefix("SUMMARY "))

    if failures > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
