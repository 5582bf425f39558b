from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import requests

"""HTTP client for the spreadsheet-backed web API.

The remote side is an Apps Script style endpoint:

- ``GET <url>`` returns ``{"sheets": [...]}``
- ``GET <url>?sheet=<name>`` returns a JSON array of row objects
- ``POST <url>`` with form fields ``action=login`` authenticates

Transport and payload problems raise SheetsApiError; callers decide whether a
failure degrades to an empty result.
"""

__all__ = [
    "SheetsApiError",
    "LoginResult",
    "SheetsClient",
]

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
LOGIN_NETWORK_ERROR = "Network error or invalid Script URL"


class SheetsApiError(Exception):
    """Raised when a request fails or returns an unexpected payload."""

    def __init__(self, message: str, error_type: str = "FETCH_FAILED") -> None:
        super().__init__(message)
        self.error_type = error_type


@dataclass(frozen=True)
class LoginResult:
    success: bool
    message: str | None = None


class SheetsClient:
    """Thin wrapper over a ``requests.Session``.

    Safe to share between the fetch worker threads: each call is a single
    independent request.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def _get_json(self, url: str, params: dict[str, str] | None = None) -> Any:
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise SheetsApiError(f"request failed: {e}", "HTTP_ERROR") from e
        try:
            return response.json()
        except ValueError as e:
            raise SheetsApiError(f"invalid JSON payload: {e}", "INVALID_PAYLOAD") from e

    def login(self, url: str, username: str, password: str) -> LoginResult:
        """Authenticate against the API. Never raises."""
        form = {"action": "login", "username": username, "password": password}
        try:
            response = self.session.post(url, data=form, timeout=self.timeout)
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"login failed: {e}")
            return LoginResult(success=False, message=LOGIN_NETWORK_ERROR)
        if not isinstance(payload, dict):
            return LoginResult(success=False, message=LOGIN_NETWORK_ERROR)
        return LoginResult(
            success=bool(payload.get("success")),
            message=payload.get("message"),
        )

    def list_sheets(self, url: str) -> list[str]:
        """Return the sheet names exposed by a project endpoint."""
        payload = self._get_json(url)
        if not isinstance(payload, dict):
            raise SheetsApiError("sheet list payload is not an object", "INVALID_PAYLOAD")
        sheets = payload.get("sheets") or []
        if not isinstance(sheets, list):
            raise SheetsApiError("'sheets' is not a list", "INVALID_PAYLOAD")
        return [str(s) for s in sheets]

    def fetch_rows(self, url: str, sheet_name: str) -> list[dict[str, Any]]:
        """Return the rows of one sheet as column -> raw value mappings."""
        payload = self._get_json(url, params={"sheet": sheet_name})
        if not isinstance(payload, list):
            raise SheetsApiError(
                f"sheet '{sheet_name}' payload is not a list", "INVALID_PAYLOAD"
            )
        return [row for row in payload if isinstance(row, dict)]
