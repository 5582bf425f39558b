from __future__ import annotations

import time
from dataclasses import replace
from pathlib import Path
from typing import Any

import yaml

from ..models.project import Category, Project
from .loader import ConfigError, load_config, project_to_dict

"""Project registry: add, edit and delete projects in the YAML config.

Only the ``projects`` list is rewritten; every other config key is kept as
loaded. Category is part of a project's identity for aggregation, so an edit
may change it but never silently drops it.
"""

__all__ = [
    "PROJECT_COLORS",
    "RegistryError",
    "ProjectRegistry",
]

PROJECT_COLORS = ["#8B5CF6", "#EC4899", "#06B6D4"]


class RegistryError(Exception):
    pass


def _category(value: Category | str) -> Category:
    try:
        return Category(value)
    except ValueError as e:
        raise RegistryError(f"unknown category: {value}") from e


class ProjectRegistry:
    def __init__(self, path: Path) -> None:
        self.path = path
        self.projects: list[Project] = list(load_config(path).projects)

    def get(self, project_id: str) -> Project:
        for p in self.projects:
            if p.id == project_id:
                return p
        raise RegistryError(f"unknown project: {project_id}")

    def add(self, name: str, url: str, category: Category | str) -> Project:
        if not name or not url:
            raise RegistryError("project name and url are required")
        existing = {p.id for p in self.projects}
        new_id = str(int(time.time() * 1000))
        while new_id in existing:
            new_id = str(int(new_id) + 1)
        project = Project(
            id=new_id,
            name=name,
            url=url,
            category=_category(category),
            color=PROJECT_COLORS[len(self.projects) % len(PROJECT_COLORS)],
        )
        self.projects.append(project)
        return project

    def update(self, project_id: str, **changes: Any) -> Project:
        current = self.get(project_id)
        if "category" in changes:
            changes["category"] = _category(changes["category"])
        unknown = set(changes) - {"name", "url", "category", "color"}
        if unknown:
            raise RegistryError(f"cannot update fields: {sorted(unknown)}")
        updated = replace(current, **changes)
        self.projects = [updated if p.id == project_id else p for p in self.projects]
        return updated

    def delete(self, project_id: str) -> None:
        self.get(project_id)
        self.projects = [p for p in self.projects if p.id != project_id]

    def save(self) -> Path:
        """Write the project list back into the config file."""
        try:
            data = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"invalid yaml: {e}") from e
        data["projects"] = [project_to_dict(p) for p in self.projects]
        self.path.write_text(yaml.safe_dump(data, sort_keys=False, allow_unicode=True), encoding="utf-8")
        return self.path
