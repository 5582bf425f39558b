# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any

import pytest

from perfdash.models.project import Category, Project
from perfdash.sheets.client import SheetsApiError


class FakeSheetsClient:
    """In-memory stand-in for SheetsClient keyed by endpoint url."""

    def __init__(
        self,
        sheets: dict[str, dict[str, list[dict[str, Any]]]],
        failing: set[tuple[str, str]] | None = None,
    ) -> None:
        self.sheets = sheets
        # (url, sheet) pairs that fail; sheet "" fails the listing
        self.failing = failing or set()
        self.fetched: list[tuple[str, str]] = []

    def list_sheets(self, url: str) -> list[str]:
        if (url, "") in self.failing:
            raise SheetsApiError("listing failed", "HTTP_ERROR")
        return list(self.sheets.get(url, {}))

    def fetch_rows(self, url: str, sheet_name: str) -> list[dict[str, Any]]:
        self.fetched.append((url, sheet_name))
        if (url, sheet_name) in self.failing:
            raise SheetsApiError(f"sheet '{sheet_name}' failed", "HTTP_ERROR")
        return [dict(r) for r in self.sheets.get(url, {}).get(sheet_name, [])]


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """api_url: https://example.test/login
identity_domain: corp.example
attendance:
  half_day_hours: 5
fetch:
  max_workers: 4
  timeout_seconds: 10
projects:
  - id: "p1"
    name: Alpha
    url: https://example.test/alpha
    category: production
  - id: "h1"
    name: Hourly
    url: https://example.test/hourly
    category: hourly
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "dashboard.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def production_project() -> Project:
    return Project(id="p1", name="Alpha", url="https://example.test/alpha", category=Category.PRODUCTION)


@pytest.fixture()
def hourly_project() -> Project:
    return Project(id="h1", name="Hourly", url="https://example.test/hourly", category=Category.HOURLY)


@pytest.fixture()
def fake_client_factory():
    return FakeSheetsClient


@pytest.fixture()
def sample_sheets() -> dict[str, dict[str, list[dict[str, Any]]]]:
    return {
        "https://example.test/alpha": {
            "Production1": [
                {"Annotator Name": "Alice", "UserName": "alice01", "Frame ID": "F1",
                 "Number of Object Annotated": "5", "Internal QC Name": "Carol",
                 "Internal Polygon Error Count": "1", "Date": "2025-09-01T10:00:00.000Z"},
                {"Annotator Name": "Alice", "UserName": "alice01", "Frame ID": "F2",
                 "Number of Object Annotated": "3", "Internal QC Name": "nil",
                 "Internal Polygon Error Count": "", "Date": ""},
                {"Annotator Name": "Bob", "UserName": "bob01", "Frame ID": "F3",
                 "Number of Object Annotated": "10", "Internal QC Name": "Carol",
                 "Internal Polygon Error Count": "2", "Date": "2025-09-01T19:30:00.000Z"},
            ],
            "QC Review": [
                {"Annotator Name": "Alice", "UserName": "alice01", "Frame ID": "F1",
                 "Number of Object Annotated": "4", "Internal QC Name": "Carol",
                 "Internal Polygon Error Count": "3"},
            ],
            "Credentials": [{"user": "x"}],
        },
        "https://example.test/hourly": {
            "1ST SEP LOGIN": [
                {"S.No": "1", "Name": "Dan", "Emp Code": "E1", "Working Hrs": "8", "Status": "", "Login Time": "09:00", "Date": "2025-09-01"},
                {"S.No": "2", "Name": "Eve", "Emp Code": "E2", "Working Hrs": "3", "Status": "", "Login Time": "10:00", "Date": "2025-09-01"},
            ],
            "2ND SEP LOGIN": [
                {"S.No": "1", "Name": "Dan", "Emp Code": "E1", "Working Hrs": "0", "Status": "", "Login Time": "nil", "Date": "2025-09-02"},
            ],
            "LOGIN CREDENTIALS": [{"user": "x"}],
        },
    }
