"""CLI entrypoint: pick a Jira issue with fzf and create a git branch for it."""

from __future__ import annotations

import argparse
import logging
import sys

from pydantic import ValidationError

from jira_git_branch import __version__
from jira_git_branch.branch import build_branch_name
from jira_git_branch.config import GbSettings, describe_validation_error
from jira_git_branch.git import REQUIRED_COMMANDS, find_missing_commands, switch_to_new_branch
from jira_git_branch.jira.cache import IssueCache
from jira_git_branch.jira.client import JiraClient
from jira_git_branch.jira.issue_service import IssueService, NoCacheAvailable
from jira_git_branch.logging import configure_logging
from jira_git_branch.selector import select_issue

logger = logging.getLogger(__name__)


def _fatal(message: str) -> None:
    print(f"gb: {message}", file=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-gb",
        description="Create a git branch from a Jira board issue picked with fzf",
    )
    parser.add_argument("--version", action="version", version=f"jira-git-branch {__version__}")
    parser.add_argument(
        "-u",
        "--update",
        action="store_true",
        help="Refresh the issue cache even if it is still fresh",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args, ignored = parser.parse_known_args(argv)

    missing = find_missing_commands(REQUIRED_COMMANDS)
    if missing:
        _fatal(f"required command not found: {missing[0]}")
        return 1

    try:
        settings = GbSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        for line in describe_validation_error(e):
            _fatal(line)
        return 2

    configure_logging(settings.log_level)
    if ignored:
        logger.debug("Ignoring extra arguments", extra={"arguments": ignored})

    try:
        cache = IssueCache(settings.cache_file, ttl_seconds=settings.cache_ttl_sec)
        with JiraClient(
            base_url=settings.jira_base_url,
            email=settings.jira_email,
            api_token=settings.jira_api_token,
            timeout=settings.http_timeout_sec,
        ) as jira:
            service = IssueService(jira=jira, cache=cache)
            issues = service.load_issues(
                board_id=settings.jira_board_id,
                max_results=settings.max_results,
                force=args.update,
            )

        if not issues:
            _fatal("no issues found (try --update)")
            return 0

        selection = select_issue(issues)
        if selection is None:
            return 0

        branch = build_branch_name(settings.branch_prefix, selection.key, selection.summary)
        print(f"=> git switch -c {branch}", flush=True)
        return switch_to_new_branch(branch)

    except NoCacheAvailable as e:
        _fatal(str(e))
        return 1

    except Exception:
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
