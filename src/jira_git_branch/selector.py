"""Interactive issue selection through fzf.

Each issue is shown as one tab-separated line: `KEY\t[STATUS]\tSUMMARY`.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterable
from dataclasses import dataclass

from jira_git_branch.jira.models import IssueRecord

logger = logging.getLogger(__name__)

FZF_PROMPT = "Jira issue> "


@dataclass(frozen=True, slots=True)
class Selection:
    """The issue row picked by the user."""

    key: str
    status: str
    summary: str


def _clean_field(value: str) -> str:
    return value.replace("\t", " ").replace("\r", " ").replace("\n", " ")


def render_line(issue: IssueRecord) -> str:
    return "\t".join(
        [
            _clean_field(issue.key),
            f"[{_clean_field(issue.status)}]",
            _clean_field(issue.summary),
        ]
    )


def render_lines(issues: Iterable[IssueRecord]) -> str:
    return "".join(render_line(issue) + "\n" for issue in issues)


def parse_selection(line: str) -> Selection | None:
    """Split a selected line back into its fields; None if it has no key."""

    parts = line.rstrip("\r\n").split("\t")
    key = parts[0].strip()
    if not key:
        return None

    status = parts[1] if len(parts) > 1 else ""
    if status.startswith("[") and status.endswith("]"):
        status = status[1:-1]
    summary = parts[2] if len(parts) > 2 else ""
    return Selection(key=key, status=status, summary=summary)


def fzf_command() -> list[str]:
    return [
        "fzf",
        "--delimiter=\t",
        "--with-nth=1,2,3",
        f"--prompt={FZF_PROMPT}",
        "--height=70%",
    ]


def select_issue(issues: list[IssueRecord]) -> Selection | None:
    """Let the user pick an issue; None when the selection was cancelled.

    fzf draws its UI on the terminal directly, so only stdin/stdout are piped.
    """

    result = subprocess.run(
        fzf_command(),
        input=render_lines(issues),
        stdout=subprocess.PIPE,
        text=True,
        check=False,
    )
    if result.returncode != 0:
        # 1: no match, 130: Esc / Ctrl-C
        logger.debug("Selection cancelled", extra={"returncode": result.returncode})
        return None

    selected = result.stdout.splitlines()
    if not selected:
        return None
    return parse_selection(selected[0])
