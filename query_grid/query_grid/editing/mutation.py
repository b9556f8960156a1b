"""UPDATE statement synthesis for detected table changes.

Statements are rendered as literal SQL, never parameterised, so the
encoding rules here are the only barrier against injection:

1. The sentinel string ``NULL`` becomes the bare keyword ``NULL``.
2. A value that, once trimmed, is wrapped in ``{}`` or ``[]`` becomes a
   quoted literal followed by ``::<json_cast>``.
3. Anything else becomes a single-quoted literal with every embedded
   single quote doubled.

Identifiers are always double-quoted with embedded double quotes doubled.
Each :class:`TableChange` yields exactly one statement; combining them or
wrapping them in a transaction is the caller's decision.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from query_grid.exceptions import MutationError
from query_grid.models.cells import NULL_SENTINEL
from query_grid.models.changes import RowChanges, TableChange

logger = logging.getLogger(__name__)

DEFAULT_JSON_CAST = "jsonb"


def quote_identifier(name: str) -> str:
    """Return *name* as a double-quoted SQL identifier."""
    return '"' + name.replace('"', '""') + '"'


def quote_string(value: str) -> str:
    """Return *value* as a single-quoted SQL string literal."""
    return "'" + value.replace("'", "''") + "'"


def looks_like_json(value: str) -> bool:
    """Return True if *value* is shaped like a JSON object or array."""
    if value == NULL_SENTINEL:
        return False
    trimmed = value.strip()
    return (trimmed.startswith("{") and trimmed.endswith("}")) or (
        trimmed.startswith("[") and trimmed.endswith("]")
    )


def encode_literal(value: str, *, json_cast: str = DEFAULT_JSON_CAST) -> str:
    """Encode a cell value as a SQL literal."""
    if value == NULL_SENTINEL:
        return "NULL"
    if looks_like_json(value):
        return f"{quote_string(value)}::{json_cast}"
    return quote_string(value)


def generate_update_sql(table_change: TableChange, *, json_cast: str = DEFAULT_JSON_CAST) -> str:
    """Render *table_change* as a single ``UPDATE`` statement.

    Raises
    ------
    MutationError
        If the change carries no edited fields.
    """
    if not table_change.changes:
        raise MutationError(
            f"No changed fields for {table_change.table_name} "
            f"row {table_change.primary_key_value!r}"
        )

    assignments = ", ".join(
        f"{quote_identifier(field)} = {encode_literal(change.new_value, json_cast=json_cast)}"
        for field, change in table_change.changes.items()
    )
    return (
        f"UPDATE {quote_identifier(table_change.table_name)} SET {assignments} "
        f"WHERE {quote_identifier(table_change.primary_key_field)} = "
        f"{encode_literal(table_change.primary_key_value, json_cast=json_cast)}"
    )


def generate_statements(
    row_changes: Sequence[RowChanges],
    *,
    json_cast: str = DEFAULT_JSON_CAST,
) -> list[str]:
    """Return one statement per table change, in row then table order."""
    statements = [
        generate_update_sql(table_change, json_cast=json_cast)
        for row in row_changes
        for table_change in row.table_changes
    ]
    logger.debug("Generated %d UPDATE statement(s)", len(statements))
    return statements
