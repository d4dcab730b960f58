"""jira-git-branch.

Create a git branch from a Jira board issue picked interactively with fzf:
- configuration loaded from the environment and a local `.env`
- board issues cached locally with a time-to-live
- branch names derived from the issue key and summary
"""

__version__ = "0.1.0"

from jira_git_branch.config import GbSettings

__all__ = ["__version__", "GbSettings"]
