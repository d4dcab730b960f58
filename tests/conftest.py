"""Test configuration and fixtures."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from jira_git_branch.jira.cache import IssueCache, cache_file_path
from jira_git_branch.jira.models import IssueRecord

SETTINGS_ENV_VARS = (
    "JIRA_BASE_URL",
    "JIRA_EMAIL",
    "JIRA_API_TOKEN",
    "JIRA_BOARD_ID",
    "GB_BRANCH_PREFIX",
    "GB_CACHE_TTL_SEC",
    "GB_MAX_RESULTS",
    "GB_HTTP_TIMEOUT_SEC",
    "GB_LOG_LEVEL",
    "XDG_CACHE_HOME",
)


@pytest.fixture
def clean_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run in an empty working directory with no git-gb settings in the environment."""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    return workdir


@pytest.fixture
def cache_home(tmp_path: Path) -> Path:
    """Provide a temporary XDG cache home."""
    home = tmp_path / "cache"
    home.mkdir()
    return home


@pytest.fixture
def jira_env(clean_env: Path, cache_home: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Provide a complete, valid configuration through the environment."""
    monkeypatch.setenv("JIRA_BASE_URL", "https://example.atlassian.net")
    monkeypatch.setenv("JIRA_EMAIL", "dev@example.com")
    monkeypatch.setenv("JIRA_API_TOKEN", "test-token")
    monkeypatch.setenv("JIRA_BOARD_ID", "206")
    monkeypatch.setenv("XDG_CACHE_HOME", str(cache_home))
    return cache_file_path(cache_home / "jira", "206")


@pytest.fixture
def issues() -> list[IssueRecord]:
    """Provide a small issue set."""
    return [
        IssueRecord(key="AB-12", summary="Fix Login Bug!!", status="In Progress"),
        IssueRecord(key="AB-13", summary="Add dark mode", status="To Do"),
    ]


@pytest.fixture
def issue_cache(tmp_path: Path) -> IssueCache:
    """Provide an issue cache under a temporary directory."""
    return IssueCache(tmp_path / "jira" / "issues_206.json", ttl_seconds=900)


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    """Undo `configure_logging` calls made by the code under test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
