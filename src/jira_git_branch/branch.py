"""Branch name derivation: `{prefix}/{KEY}_{slug}`."""

from __future__ import annotations

import re

SLUG_MAX_LENGTH = 50

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_UNDERSCORES = re.compile(r"_+")


def slugify(text: str) -> str:
    """Reduce free text to `[a-z0-9_]`, at most 50 characters.

    Runs of other characters become a single underscore; the result never
    starts or ends with an underscore and may be empty.
    """

    slug = _NON_ALNUM.sub("_", text.lower())
    slug = _UNDERSCORES.sub("_", slug.strip("_"))
    return slug[:SLUG_MAX_LENGTH].rstrip("_")


def build_branch_name(prefix: str, key: str, summary: str) -> str:
    return f"{prefix}/{key}_{slugify(summary)}"
