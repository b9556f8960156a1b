"""Base-table extraction from FROM and JOIN clauses.

This is a pattern matcher, not a SQL grammar.  It recognises exactly:

* ``FROM <table> [[AS] alias]`` -- first occurrence only;
* ``JOIN <table> [[AS] alias]`` -- every occurrence, in source order.

``<table>`` may be bare (``users``), quoted (``"Users"``) or
schema-qualified with either side quoted (``public.users``,
``"public"."users"``, ``public."users"``, ``"public".users``).  Only the
table part of a qualified name is kept.  Subqueries, table functions and
comma-separated FROM lists are not recognised.

An alias position never captures a clause keyword: ``FROM users WHERE ...``
yields ``alias=None`` rather than ``alias="where"``.  This deliberately
narrows the exposed ``alias`` field; table names and editability are
unaffected.
"""

from __future__ import annotations

import logging
import re

from query_grid.models.metadata import TableRef
from query_grid.parser.normalizer import normalize_whitespace

logger = logging.getLogger(__name__)

_QUOTED = r'"[^"]+"'
_BARE = r"[a-z_][a-z0-9_]*"

# "schema".table is tried before a lone quoted name so the table part wins.
TABLE_IDENTIFIER = (
    rf"(?:{_QUOTED}\.{_BARE}"
    rf"|{_QUOTED}(?:\.{_QUOTED})?"
    rf"|{_BARE}(?:\.{_BARE})?(?:\.{_QUOTED})?)"
)
SIMPLE_IDENTIFIER = rf"(?:{_QUOTED}|{_BARE})"

# Clause keywords that may directly follow a table name and must not be
# read as its alias.
_NON_ALIAS_KEYWORDS = (
    "as",
    "cross",
    "except",
    "fetch",
    "for",
    "full",
    "group",
    "having",
    "inner",
    "intersect",
    "join",
    "lateral",
    "left",
    "limit",
    "natural",
    "offset",
    "on",
    "order",
    "outer",
    "right",
    "tablesample",
    "union",
    "using",
    "where",
    "window",
)
_ALIAS = rf"(?!(?:{'|'.join(_NON_ALIAS_KEYWORDS)})\b)({SIMPLE_IDENTIFIER})"

_FLAGS = re.IGNORECASE | re.ASCII

_FROM_RE = re.compile(rf"\bfrom\s+({TABLE_IDENTIFIER})(?:\s+(?:as\s+)?{_ALIAS})?", _FLAGS)
_JOIN_RE = re.compile(rf"\bjoin\s+({TABLE_IDENTIFIER})(?:\s+(?:as\s+)?{_ALIAS})?", _FLAGS)
_FROM_TABLE_RE = re.compile(rf"\bfrom\s+({TABLE_IDENTIFIER})", _FLAGS)
_REFERENCE_PART_RE = re.compile(r'"[^"]+"|[^."]+')


def strip_identifier_quotes(identifier: str) -> str:
    """Remove one pair of surrounding double quotes, if present."""
    if len(identifier) >= 2 and identifier.startswith('"') and identifier.endswith('"'):
        return identifier[1:-1]
    return identifier


def parse_table_reference(reference: str) -> str:
    """Return the table part of a possibly schema-qualified *reference*.

    The schema qualifier is discarded.  Quotes are removed but the casing
    of the name is preserved.
    """
    parts = _REFERENCE_PART_RE.findall(reference)
    if not parts:
        return strip_identifier_quotes(reference)
    return strip_identifier_quotes(parts[-1])


def _table_ref(match: re.Match[str]) -> TableRef:
    alias = match.group(2)
    return TableRef(
        name=parse_table_reference(match.group(1)).lower(),
        alias=strip_identifier_quotes(alias).lower() if alias else None,
    )


def extract_tables(sql: str) -> list[TableRef]:
    """Return the tables referenced by *sql*: FROM first, then each JOIN.

    An empty list means no table could be found; such a query is never
    editable.
    """
    normalized = normalize_whitespace(sql)
    tables: list[TableRef] = []

    from_match = _FROM_RE.search(normalized)
    if from_match:
        tables.append(_table_ref(from_match))

    for join_match in _JOIN_RE.finditer(normalized):
        tables.append(_table_ref(join_match))

    logger.debug("Extracted %d table(s): %s", len(tables), [t.name for t in tables])
    return tables


def extract_primary_table_name(sql: str) -> str | None:
    """Return the FROM table's name with quotes and schema removed, or ``None``.

    Unlike :func:`extract_tables` the original casing is kept, which makes
    the result suitable as a display title.
    """
    match = _FROM_TABLE_RE.search(normalize_whitespace(sql))
    return parse_table_reference(match.group(1)) if match else None
