"""Jira agile REST API client.

Only the three read calls git-gb needs: the active sprint of a board, the
issues of a sprint and the issues of a board. Responses are reduced to
`IssueRecord`s right here so nothing else deals with Jira's JSON.
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any

import requests

from jira_git_branch import __version__
from jira_git_branch.jira.models import IssueRecord

logger = logging.getLogger(__name__)

ISSUE_FIELDS = "summary,status"


class JiraResponseError(ValueError):
    """Raised when Jira answers with a body that is not the expected JSON."""


class JiraClient:
    """Small wrapper around a `requests.Session` authenticated with an API token."""

    def __init__(
        self,
        *,
        base_url: str,
        email: str,
        api_token: str,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("Jira base URL is required")
        if not email or not api_token:
            raise ValueError("Jira email and API token are required")

        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.auth = (email, api_token)
        self._session.headers.update(
            {
                "Accept": "application/json",
                "User-Agent": f"jira-git-branch/{__version__}",
            }
        )

    def __enter__(self) -> JiraClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    def _agile_url(self, path: str) -> str:
        return f"{self._base_url}/rest/agile/1.0/{path.lstrip('/')}"

    def _get_json(self, url: str, *, params: dict[str, Any]) -> dict[str, Any]:
        logger.debug("Jira GET", extra={"url": url, "params": params})
        resp = self._session.get(url, params=params, timeout=self._timeout)
        resp.raise_for_status()
        try:
            data = resp.json()
        except ValueError as e:
            raise JiraResponseError(f"Jira returned a non-JSON body for {url}") from e
        if not isinstance(data, dict):
            raise JiraResponseError(f"Jira returned an unexpected body for {url}")
        return data

    def get_active_sprint_id(self, *, board_id: str | int) -> int | None:
        """Return the id of the board's active sprint, or None.

        Boards without sprints (kanban) answer with a 4xx; that is treated the
        same as "no active sprint".
        """

        url = self._agile_url(f"board/{board_id}/sprint")
        try:
            data = self._get_json(url, params={"state": "active", "maxResults": 1})
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status is not None and 400 <= status < 500:
                logger.debug(
                    "Board has no sprint support", extra={"board_id": board_id, "status": status}
                )
                return None
            raise

        values = data.get("values")
        if not isinstance(values, list) or not values:
            return None
        first = values[0]
        if not isinstance(first, dict):
            return None
        sprint_id = first.get("id")
        if isinstance(sprint_id, bool) or not isinstance(sprint_id, int):
            return None
        return sprint_id

    def get_sprint_issues(self, *, sprint_id: int, max_results: int) -> list[IssueRecord]:
        url = self._agile_url(f"sprint/{sprint_id}/issue")
        data = self._get_json(url, params={"fields": ISSUE_FIELDS, "maxResults": max_results})
        return self._parse_issues(data)

    def get_board_issues(self, *, board_id: str | int, max_results: int) -> list[IssueRecord]:
        url = self._agile_url(f"board/{board_id}/issue")
        data = self._get_json(url, params={"fields": ISSUE_FIELDS, "maxResults": max_results})
        return self._parse_issues(data)

    @staticmethod
    def _parse_issues(data: dict[str, Any]) -> list[IssueRecord]:
        raw_issues = data.get("issues")
        if not isinstance(raw_issues, list):
            raise JiraResponseError("Jira response has no 'issues' list")

        records: list[IssueRecord] = []
        for item in raw_issues:
            record = JiraClient._parse_issue(item)
            if record is not None:
                records.append(record)
        return records

    @staticmethod
    def _parse_issue(item: Any) -> IssueRecord | None:
        if not isinstance(item, dict):
            return None
        key = item.get("key")
        if not isinstance(key, str) or not key.strip():
            return None

        fields = item.get("fields")
        if not isinstance(fields, dict):
            fields = {}
        summary = fields.get("summary")
        status = fields.get("status")
        status_name = status.get("name") if isinstance(status, dict) else None

        return IssueRecord(
            key=key.strip(),
            summary=summary if isinstance(summary, str) else "",
            status=status_name if isinstance(status_name, str) else "",
        )
