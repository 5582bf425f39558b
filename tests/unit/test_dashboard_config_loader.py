from __future__ import annotations

import inspect
from pathlib import Path

import pytest

from perfdash.config.loader import ConfigError, FetchConfig, load_config
from perfdash.models.project import Category
from perfdash.services import attendance, orchestrator
from perfdash.services.discovery import discover_sheets
from perfdash.sheets import client


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_load_config_ok(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.api_url == "https://example.test/login"
    assert cfg.identity_domain == "corp.example"
    assert cfg.half_day_hours == 5.0
    assert cfg.fetch == FetchConfig(max_workers=4, timeout_seconds=10.0)
    assert [(p.id, p.name, p.category) for p in cfg.projects] == [
        ("p1", "Alpha", Category.PRODUCTION),
        ("h1", "Hourly", Category.HOURLY),
    ]


def test_load_config_defaults(temp_workdir: Path):
    path = _write(
        temp_workdir / "min.yml",
        "api_url: u\nprojects:\n  - {id: 7, name: P, url: x, category: hourly, color: '#fff'}\n",
    )
    cfg = load_config(path)
    assert cfg.identity_domain is None
    assert cfg.half_day_hours == 5.0
    assert cfg.fetch == FetchConfig()
    assert cfg.projects[0].id == "7"
    assert cfg.projects[0].color == "#fff"


def test_load_config_missing_file(temp_workdir: Path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(temp_workdir / "nope.yml")


def test_load_config_invalid_yaml(temp_workdir: Path):
    path = _write(temp_workdir / "bad.yml", "api_url: [unclosed\n")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(path)


def test_load_config_root_must_be_mapping(temp_workdir: Path):
    path = _write(temp_workdir / "list.yml", "- a\n- b\n")
    with pytest.raises(ConfigError, match="mapping"):
        load_config(path)


@pytest.mark.parametrize(
    "text",
    [
        "projects: []\n",
        "api_url: u\n",
        "api_url: u\nprojects: []\nextra: 1\n",
        "api_url: u\nprojects:\n  - {id: a, name: P, url: x, category: weekly}\n",
        "api_url: u\nprojects:\n  - {id: a, name: P, category: hourly}\n",
        "api_url: u\nprojects: []\nfetch: {max_workers: 0}\n",
    ],
)
def test_load_config_schema_violations(temp_workdir: Path, text: str):
    path = _write(temp_workdir / "invalid.yml", text)
    with pytest.raises(ConfigError, match="validation failed"):
        load_config(path)


def test_load_config_duplicate_ids(temp_workdir: Path):
    path = _write(
        temp_workdir / "dup.yml",
        "api_url: u\nprojects:\n"
        "  - {id: a, name: P, url: x, category: hourly}\n"
        "  - {id: a, name: Q, url: y, category: production}\n",
    )
    with pytest.raises(ConfigError, match="duplicate project ids"):
        load_config(path)


def test_config_defaults_match_service_defaults(temp_workdir: Path):
    path = _write(temp_workdir / "min.yml", "api_url: u\nprojects: []\n")
    cfg = load_config(path)
    assert cfg.half_day_hours == attendance.DEFAULT_HALF_DAY_HOURS
    assert cfg.fetch.max_workers == orchestrator.DEFAULT_MAX_WORKERS
    assert cfg.fetch.timeout_seconds == client.DEFAULT_TIMEOUT_SECONDS
    assert inspect.signature(discover_sheets).parameters["max_workers"].default == orchestrator.DEFAULT_MAX_WORKERS
