"""Whitespace normalisation shared by every query-text heuristic."""

from __future__ import annotations

import re

_MULTI_SPACE_RE = re.compile(r"\s+")


def normalize_whitespace(sql: str) -> str:
    """Collapse every whitespace run in *sql* to one space and strip the ends.

    Keyword casing and comments are left alone; the pattern rules that run
    on the result are case-insensitive.
    """
    return _MULTI_SPACE_RE.sub(" ", sql).strip()
