"""Primary-key resolution by naming convention.

Primary keys are never looked up in the catalogue.  A table's key is the
first result column, in :data:`PRIMARY_KEY_CANDIDATES` priority order, that
looks like one.  Table order plus candidate order fully determine the
outcome.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Final

from query_grid.models.metadata import ColumnInfo, TableRef

logger = logging.getLogger(__name__)

PRIMARY_KEY_CANDIDATES: Final[tuple[str, ...]] = ("id", "uuid", "pk", "_id")


def _mapped_candidate(
    table: TableRef,
    columns: Sequence[ColumnInfo],
) -> tuple[int, str] | None:
    for candidate in PRIMARY_KEY_CANDIDATES:
        for idx, column in enumerate(columns):
            if column.table_name == table.name and column.field_name.lower() == candidate:
                return idx, candidate
    return None


def _unclaimed_candidate(columns: Sequence[ColumnInfo]) -> tuple[int, str] | None:
    for candidate in PRIMARY_KEY_CANDIDATES:
        for idx, column in enumerate(columns):
            if column.result_name.lower() == candidate and not column.is_primary_key:
                return idx, candidate
    return None


def resolve_primary_keys(
    columns: Sequence[ColumnInfo],
    tables: Sequence[TableRef],
) -> tuple[list[TableRef], list[ColumnInfo]]:
    """Assign a primary-key column to each table.

    For each table, a column already mapped to it whose field name is a
    candidate wins.  Otherwise any column whose result name is a candidate
    and that no earlier table has claimed is taken; if that column had no
    owner it is assigned to this table.

    Returns
    -------
    tuple
        ``(tables, columns)`` as new lists of updated copies, in input
        order.  The inputs are left untouched.
    """
    resolved_columns = list(columns)
    resolved_tables: list[TableRef] = []

    for table in tables:
        found = _mapped_candidate(table, resolved_columns)
        if found is None:
            found = _unclaimed_candidate(resolved_columns)

        if found is None:
            logger.debug("No primary key resolved for table %s", table.name)
            resolved_tables.append(table)
            continue

        idx, candidate = found
        column = resolved_columns[idx]
        owner = column.table_name if column.table_name is not None else table.name
        resolved_columns[idx] = column.model_copy(update={"table_name": owner, "is_primary_key": True})
        resolved_tables.append(
            table.model_copy(update={"primary_key_column": column.result_name, "primary_key_field": candidate})
        )
        logger.debug(
            "Primary key for %s: column %s (field %s)",
            table.name,
            column.result_name,
            candidate,
        )

    return resolved_tables, resolved_columns
