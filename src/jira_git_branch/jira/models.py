"""Issue records shared by the Jira client, the cache and the selector."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class IssueRecord(BaseModel):
    """Minimal representation of a board issue."""

    model_config = ConfigDict(frozen=True)

    key: str
    summary: str = Field(default="")
    status: str = Field(default="")


class IssueCacheFile(BaseModel):
    """On-disk layout of the issue cache: `{"issues": [...]}`."""

    issues: list[IssueRecord] = Field(default_factory=list)
