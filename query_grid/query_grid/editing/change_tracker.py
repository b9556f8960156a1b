"""Snapshot diffing into per-row, per-table change sets.

Edits are grouped by ``(table, primary-key value)`` within each row, so two
edited fields of the same table row yield one :class:`TableChange` and edits
to two joined tables yield two.  Edits that cannot be tied to a stored row
(no resolved primary key, or an empty key value in the row) are dropped
without affecting the rest of the row or other rows.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from query_grid.models.cells import Cell
from query_grid.models.changes import ChangeSummary, FieldChange, RowChanges, TableChange
from query_grid.models.metadata import QueryMetadata
from query_grid.telemetry.profiling import profile_operation

logger = logging.getLogger(__name__)


def _cell_at(row: Sequence[Cell], index: int) -> Cell | None:
    return row[index] if 0 <= index < len(row) else None


def _diff_row(
    row_index: int,
    current_row: Sequence[Cell],
    original_row: Sequence[Cell],
    metadata: QueryMetadata,
) -> list[TableChange]:
    grouped: dict[tuple[str, str], TableChange] = {}

    for col_idx, column in enumerate(metadata.columns):
        current_cell = _cell_at(current_row, col_idx)
        if current_cell is not None and current_cell.read_only:
            continue
        if column.is_computed or column.is_primary_key or column.table_name is None:
            continue

        original_cell = _cell_at(original_row, col_idx)
        current_value = current_cell.value if current_cell is not None else ""
        original_value = original_cell.value if original_cell is not None else ""
        if current_value == original_value:
            continue

        table = metadata.table_for(column.table_name)
        if table is None or table.primary_key_column is None:
            logger.debug(
                "Dropping edit at row %d column %s: table %s has no primary key",
                row_index,
                column.result_name,
                column.table_name,
            )
            continue

        pk_idx = metadata.column_index(table.primary_key_column)
        pk_cell = _cell_at(current_row, pk_idx) if pk_idx is not None else None
        pk_value = pk_cell.value if pk_cell is not None else ""
        if not pk_value:
            logger.debug(
                "Dropping edit at row %d column %s: empty primary key value",
                row_index,
                column.result_name,
            )
            continue

        key = (table.name, pk_value)
        table_change = grouped.get(key)
        if table_change is None:
            table_change = TableChange(
                table_name=table.name,
                primary_key_column=table.primary_key_column,
                primary_key_field=table.primary_key_field,
                primary_key_value=pk_value,
            )
            grouped[key] = table_change

        table_change.changes[column.field_name] = FieldChange(
            old_value=original_value,
            new_value=current_value,
        )

    return list(grouped.values())


@profile_operation("changes.diff")
def diff_snapshots(
    current: Sequence[Sequence[Cell]],
    original: Sequence[Sequence[Cell]],
    metadata: QueryMetadata,
) -> list[RowChanges]:
    """Compare *current* against *original* and return the pending changes.

    Only rows present in both snapshots are compared.  Calling this twice
    on unchanged inputs returns equal results; neither snapshot is mutated.
    """
    if not metadata.is_editable:
        return []

    row_changes: list[RowChanges] = []
    for row_index, (current_row, original_row) in enumerate(zip(current, original, strict=False)):
        table_changes = _diff_row(row_index, current_row, original_row, metadata)
        if table_changes:
            row_changes.append(RowChanges(row_index=row_index, table_changes=table_changes))

    return row_changes


def summarize_changes(row_changes: Sequence[RowChanges]) -> ChangeSummary:
    """Count edited fields, edited rows and distinct tables touched."""
    total = 0
    tables: set[str] = set()
    for row in row_changes:
        for table_change in row.table_changes:
            total += len(table_change.changes)
            tables.add(table_change.table_name)
    return ChangeSummary(total_changes=total, row_count=len(row_changes), table_count=len(tables))
