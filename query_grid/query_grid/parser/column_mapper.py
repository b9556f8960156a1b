"""Result-column to table/field mapping.

Maps every column returned by the data store back onto the table and
stored field it was read from, using only the query text.  The rules are
deliberately simple text patterns over the SELECT clause:

* ``SELECT *`` with exactly one table: every column belongs to that table.
* Explicit column list: the first ``<alias-or-table>.<field>`` occurrence
  whose matched span contains the result-column name, or whose field equals
  it (case-insensitive), and whose prefix resolves through the alias map,
  decides the owner.  Unmatched columns fall back to the sole table when
  only one table is present.
* A column is *computed* when the SELECT clause shows it as the alias of a
  parenthesised expression, an arithmetic or ``||`` expression, or a call
  to ``coalesce``/``case``/``nullif``/``concat``.

These are heuristics; known false positives (an arithmetic expression
anywhere before a plain column) are accepted behaviour.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from query_grid.models.metadata import ColumnInfo, TableRef
from query_grid.parser.normalizer import normalize_whitespace

logger = logging.getLogger(__name__)

_FLAGS = re.IGNORECASE | re.ASCII

_SELECT_CLAUSE_RE = re.compile(r"select\s+(.+?)\s+from\s", _FLAGS)

COMPUTED_FUNCTIONS = ("coalesce", "case", "nullif", "concat")


def _unmapped(result_columns: Sequence[str]) -> list[ColumnInfo]:
    return [ColumnInfo(result_name=col, field_name=col) for col in result_columns]


def _alias_map(tables: Sequence[TableRef]) -> dict[str, str]:
    aliases: dict[str, str] = {}
    for table in tables:
        if table.alias:
            aliases[table.alias] = table.name
        aliases[table.name] = table.name
    return aliases


def _qualified_field_re(result_column: str) -> re.Pattern[str]:
    name = re.escape(result_column)
    return re.compile(
        rf"\b([a-z_][a-z0-9_]*)\.([a-z_][a-z0-9_]*)(?:\s+(?:as\s+)?{name})?\b",
        _FLAGS,
    )


def _computed_patterns(result_column: str) -> list[re.Pattern[str]]:
    name = re.escape(result_column)
    functions = "|".join(COMPUTED_FUNCTIONS)
    return [
        re.compile(rf"\([^)]+\)\s+(?:as\s+)?{name}\b", _FLAGS),
        re.compile(rf"\w+\s*[+\-*/]\s*\w+.*?(?:as\s+)?{name}\b", _FLAGS),
        re.compile(rf"\w+\s*\|\|\s*\w+.*?(?:as\s+)?{name}\b", _FLAGS),
        re.compile(rf"\b(?:{functions})\s*\(.*?(?:as\s+)?{name}\b", _FLAGS),
    ]


def is_computed_column(select_clause: str, result_column: str) -> bool:
    """Return True if *select_clause* shows *result_column* as a derived value."""
    return any(p.search(select_clause) for p in _computed_patterns(result_column))


def _find_explicit_source(
    select_clause: str,
    result_column: str,
    aliases: dict[str, str],
) -> tuple[str, str] | None:
    """Return ``(table_name, field_name)`` for the first qualifying reference."""
    wanted = result_column.lower()
    for match in _qualified_field_re(result_column).finditer(select_clause):
        prefix, field = match.group(1), match.group(2)
        if wanted not in match.group(0).lower() and field.lower() != wanted:
            continue
        table_name = aliases.get(prefix.lower())
        if table_name:
            return table_name, field
    return None


def map_columns(
    sql: str,
    result_columns: Sequence[str],
    tables: Sequence[TableRef],
) -> list[ColumnInfo]:
    """Build one :class:`ColumnInfo` per result column, in result order.

    Parameters
    ----------
    sql:
        The query text as executed.
    result_columns:
        Ordered column names reported by the execution step.
    tables:
        Output of :func:`~query_grid.parser.table_extractor.extract_tables`.
    """
    normalized = normalize_whitespace(sql)
    select_match = _SELECT_CLAUSE_RE.search(normalized)
    if not select_match:
        return _unmapped(result_columns)

    select_clause = select_match.group(1)
    is_select_star = select_clause.strip() == "*"
    aliases = _alias_map(tables)
    sole_table = tables[0].name if len(tables) == 1 else None

    columns: list[ColumnInfo] = []
    for result_column in result_columns:
        table_name: str | None = None
        field_name = result_column
        is_computed = False

        if not is_select_star:
            source = _find_explicit_source(select_clause, result_column, aliases)
            if source is not None:
                table_name, field_name = source
            is_computed = is_computed_column(select_clause, result_column)

        columns.append(
            ColumnInfo(
                result_name=result_column,
                table_name=table_name or sole_table,
                field_name=field_name,
                is_computed=is_computed,
            )
        )

    logger.debug(
        "Mapped %d column(s); computed=%s",
        len(columns),
        [c.result_name for c in columns if c.is_computed],
    )
    return columns
