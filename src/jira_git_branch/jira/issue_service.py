"""Issue fetching with a local cache fallback.

Rules:
- prefer the issues of the board's active sprint, otherwise the board's issues
- a successful fetch replaces the cache file wholesale
- a failed fetch is not fatal while a (possibly stale) cache file exists
"""

from __future__ import annotations

import logging
from pathlib import Path

import requests

from jira_git_branch.jira.cache import IssueCache
from jira_git_branch.jira.client import JiraClient, JiraResponseError
from jira_git_branch.jira.models import IssueRecord

logger = logging.getLogger(__name__)


class NoCacheAvailable(Exception):
    """Raised when the fetch failed and there is no cache file to fall back to."""

    def __init__(self, path: Path) -> None:
        super().__init__("no cache and fetch failed. check jira settings.")
        self.path = path


class IssueService:
    """Keeps the issue cache of one board populated."""

    def __init__(self, *, jira: JiraClient, cache: IssueCache) -> None:
        self._jira = jira
        self._cache = cache

    def _active_sprint_id(self, *, board_id: str | int) -> int | None:
        try:
            return self._jira.get_active_sprint_id(board_id=board_id)
        except (requests.RequestException, JiraResponseError) as e:
            logger.warning(
                "Active sprint lookup failed; falling back to board issues",
                extra={"board_id": board_id, "error": str(e)},
            )
            return None

    def fetch_issues(self, *, board_id: str | int, max_results: int) -> list[IssueRecord]:
        """Fetch issues from the active sprint, or from the board when there is none.

        A failed sprint lookup counts as "no active sprint".
        """

        sprint_id = self._active_sprint_id(board_id=board_id)
        if sprint_id is not None:
            logger.info(
                "Fetching active sprint issues",
                extra={"board_id": board_id, "sprint_id": sprint_id},
            )
            return self._jira.get_sprint_issues(sprint_id=sprint_id, max_results=max_results)

        logger.info("No active sprint; fetching board issues", extra={"board_id": board_id})
        return self._jira.get_board_issues(board_id=board_id, max_results=max_results)

    def refresh(self, *, board_id: str | int, max_results: int) -> list[IssueRecord]:
        issues = self.fetch_issues(board_id=board_id, max_results=max_results)
        self._cache.save(issues)
        logger.info(
            "Issue cache refreshed",
            extra={"path": str(self._cache.path), "issue_count": len(issues)},
        )
        return issues

    def load_issues(
        self, *, board_id: str | int, max_results: int, force: bool = False
    ) -> list[IssueRecord]:
        """Return the cached issues, refreshing the cache first when needed.

        Raises:
            NoCacheAvailable: If the refresh failed and no cache file exists.
        """

        if force or not self._cache.is_fresh():
            try:
                self.refresh(board_id=board_id, max_results=max_results)
            except (requests.RequestException, JiraResponseError, OSError) as e:
                logger.warning(
                    "Failed to refresh issue cache; using existing cache if any",
                    extra={"board_id": board_id, "error": str(e)},
                )
        else:
            logger.debug("Issue cache is fresh", extra={"path": str(self._cache.path)})

        if not self._cache.exists():
            raise NoCacheAvailable(self._cache.path)

        return self._cache.load()
