"""External command helpers: prerequisite checks and branch creation."""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Iterable

logger = logging.getLogger(__name__)

REQUIRED_COMMANDS: tuple[str, ...] = ("git", "fzf")


def find_missing_commands(commands: Iterable[str] = REQUIRED_COMMANDS) -> list[str]:
    """Return the commands that are not available on PATH, in the given order."""

    return [command for command in commands if shutil.which(command) is None]


def switch_to_new_branch(branch: str) -> int:
    """Create `branch` and switch to it, returning git's exit status.

    git's own output is left on the terminal; nothing is retried.
    """

    logger.info("Creating branch", extra={"branch": branch})
    result = subprocess.run(["git", "switch", "-c", branch], check=False)
    if result.returncode != 0:
        logger.debug(
            "git switch failed", extra={"branch": branch, "returncode": result.returncode}
        )
    return result.returncode
