"""JSON-file backed cache of board issues.

One file per board, replaced wholesale on every successful fetch. Freshness is
purely time based: the file is fresh while fewer than `ttl_seconds` whole seconds
have passed since it was last written.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from pathlib import Path

from pydantic import ValidationError

from jira_git_branch.jira.models import IssueCacheFile, IssueRecord

logger = logging.getLogger(__name__)


def cache_file_path(cache_dir: Path, board_id: str | int) -> Path:
    """Return the cache file used for `board_id` under `cache_dir`."""

    return cache_dir / f"issues_{board_id}.json"


class IssueCache:
    """Board issue cache stored at a single path."""

    def __init__(self, path: Path, *, ttl_seconds: int) -> None:
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must be non-negative")
        self._path = path
        self._ttl_seconds = ttl_seconds

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def is_fresh(self, *, now: float | None = None) -> bool:
        """Return True if the cache was written less than `ttl_seconds` ago."""

        try:
            modified = self._path.stat().st_mtime
        except FileNotFoundError:
            return False

        current = time.time() if now is None else now
        age = int(current) - int(modified)
        return age < self._ttl_seconds

    def load(self) -> list[IssueRecord]:
        if not self.exists():
            return []

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning(
                "Issue cache is not valid JSON; treating as empty",
                extra={"path": str(self._path)},
            )
            return []

        try:
            document = IssueCacheFile.model_validate(raw)
        except ValidationError:
            logger.warning(
                "Issue cache has unexpected shape; treating as empty",
                extra={"path": str(self._path)},
            )
            return []

        return list(document.issues)

    def save(self, issues: list[IssueRecord]) -> None:
        """Replace the cache content with `issues`.

        The new document is written next to the cache file and renamed over it,
        so the previous content survives any failure before the rename.
        """

        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = IssueCacheFile(issues=issues).model_dump(mode="json")
        text = json.dumps(payload, indent=2, ensure_ascii=False) + "\n"

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(text)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug(
            "Issue cache written", extra={"path": str(self._path), "issue_count": len(issues)}
        )
