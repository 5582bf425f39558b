from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

"""Heuristic header resolution for inconsistently named spreadsheet columns.

Different sheets spell the same field differently ("Annotator Name",
"annotator_name", "Worker"). Consumers never index rows by a fixed header;
they resolve the actual column name first with ``find_key``.
"""

__all__ = [
    "KEY_ALIASES",
    "normalize_key",
    "find_key",
    "observed_keys",
]

_SEPARATORS = re.compile(r"[\s\-_]+")


def normalize_key(name: Any) -> str:
    """Lower-case and drop whitespace, hyphens and underscores."""
    if name is None:
        return ""
    return _SEPARATORS.sub("", str(name).lower()).strip()


def _aliases(*names: str) -> list[str]:
    return [normalize_key(n) for n in names]


# normalized canonical name -> acceptable normalized aliases
KEY_ALIASES: dict[str, list[str]] = {
    "username": _aliases("username", "user", "userid", "user_name"),
    "annotatorname": _aliases("annotatorname", "annotator", "name", "worker", "annotator_name"),
    "frameid": _aliases("frameid", "frame", "id", "imageid", "frame_id"),
    "numberofobjectannotated": _aliases(
        "numberofobjectannotated",
        "objects",
        "objectcount",
        "totalobjects",
        "annotatedobjects",
        "object_count",
    ),
    "date": _aliases("date", "timestamp", "createdat", "day", "time", "period", "entrydate"),
}


def find_key(keys: Sequence[str], canonical: str) -> str | None:
    """Find the observed column that best matches a canonical field name.

    An exact normalized match always wins over an alias match, so a short
    alias such as ``name`` cannot steal a column that literally matches.
    When several observed keys qualify, the first one in observed order wins.

    Args:
        keys: Observed column names, in source order
        canonical: Canonical field name, e.g. "Annotator Name"

    Returns:
        The matching observed key, or None when the column is absent
    """
    if not keys:
        return None
    target = normalize_key(canonical)
    for k in keys:
        if normalize_key(k) == target:
            return k

    possible = KEY_ALIASES.get(target, [target])
    for k in keys:
        if normalize_key(k) in possible:
            return k
    return None


def observed_keys(rows: Iterable[Mapping[str, Any]]) -> list[str]:
    """Order-preserving union of the keys of every row."""
    seen: dict[str, None] = {}
    for row in rows:
        for k in row:
            seen.setdefault(k, None)
    return list(seen)
