from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.project import Category, Project
from ..services.attendance import DEFAULT_HALF_DAY_HOURS
from ..services.orchestrator import DEFAULT_MAX_WORKERS
from ..sheets.client import DEFAULT_TIMEOUT_SECONDS

"""Dashboard configuration loader.

Responsibilities:
- Load the YAML config (default ``config/dashboard.yml``)
- Validate it against ``dashboard_schema.json``
- Apply defaults for optional sections
"""

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "ConfigError",
    "FetchConfig",
    "DashboardConfig",
    "load_config",
    "parse_config",
    "project_to_dict",
]

DEFAULT_CONFIG_PATH = Path("config/dashboard.yml")
SCHEMA_PATH = Path(__file__).parent / "dashboard_schema.json"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class FetchConfig:
    max_workers: int = DEFAULT_MAX_WORKERS
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS


@dataclass(frozen=True)
class DashboardConfig:
    api_url: str  # login endpoint
    projects: list[Project]
    identity_domain: str | None = None  # None disables identity canonicalization
    half_day_hours: float = DEFAULT_HALF_DAY_HOURS
    fetch: FetchConfig = field(default_factory=FetchConfig)


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or invalid, or the data
            fails validation (missing keys, wrong types, unknown keys)
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _parse_project(raw: dict[str, Any]) -> Project:
    return Project(
        id=str(raw["id"]),
        name=raw["name"],
        url=raw["url"],
        category=Category(raw["category"]),
        color=raw.get("color"),
    )


def project_to_dict(project: Project) -> dict[str, Any]:
    out: dict[str, Any] = {
        "id": project.id,
        "name": project.name,
        "url": project.url,
        "category": project.category.value,
    }
    if project.color:
        out["color"] = project.color
    return out


def parse_config(data: dict[str, Any]) -> DashboardConfig:
    _validate_config_schema(data)

    projects = [_parse_project(p) for p in data["projects"]]
    ids = [p.id for p in projects]
    if len(ids) != len(set(ids)):
        raise ConfigError(f"duplicate project ids: {sorted({i for i in ids if ids.count(i) > 1})}")

    attendance = data.get("attendance") or {}
    fetch_raw = data.get("fetch") or {}
    return DashboardConfig(
        api_url=data["api_url"],
        projects=projects,
        identity_domain=data.get("identity_domain") or None,
        half_day_hours=float(attendance.get("half_day_hours", DEFAULT_HALF_DAY_HOURS)),
        fetch=FetchConfig(
            max_workers=int(fetch_raw.get("max_workers", DEFAULT_MAX_WORKERS)),
            timeout_seconds=float(fetch_raw.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)),
        ),
    )


def load_config(path: Path) -> DashboardConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")
    return parse_config(data)
