from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..sheets.values import cell_text

"""Annotator / user identity canonicalization.

Sheets record the same person as "alice", "Alice@old.example" or
"alice@corp.example". When a domain is configured, every identity is reduced
to its local part and re-suffixed with that domain so rows from different
sheets accumulate under one key. ``display`` strips the domain again for
presentation.
"""

__all__ = [
    "INVALID_IDENTITIES",
    "IdentityCanonicalizer",
]

INVALID_IDENTITIES = {"undefined", "nil"}


@dataclass(frozen=True)
class IdentityCanonicalizer:
    domain: str | None = None

    def clean(self, value: Any) -> str:
        """Trimmed identity, or "" for blank / placeholder values."""
        text = cell_text(value)
        if not text or text.lower() in INVALID_IDENTITIES:
            return ""
        return text

    def canonical(self, value: Any) -> str:
        text = self.clean(value)
        if not text or not self.domain:
            return text
        local = text.split("@")[0].strip()
        if not local:
            return ""
        return f"{local}@{self.domain}"

    @staticmethod
    def display(identity: str) -> str:
        return identity.split("@")[0]
