"""Conversion of raw result rows into grid cell snapshots."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from typing import Any

from query_grid.editing.editability import read_only_mask
from query_grid.models.cells import NULL_SENTINEL, Cell, CellMatrix
from query_grid.models.metadata import QueryMetadata


def format_cell_value(value: Any) -> str:
    """Render a driver value as the string shown in a grid cell.

    ``None`` becomes the ``NULL`` sentinel, containers become compact JSON
    and booleans are rendered the way SQL clients print them.
    """
    if value is None:
        return NULL_SENTINEL
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
    return str(value)


def build_snapshot(rows: Iterable[Mapping[str, Any]], metadata: QueryMetadata) -> CellMatrix:
    """Convert result *rows* into a cell matrix in ``metadata.columns`` order.

    Read-only flags come from the metadata alone, so the same rows always
    produce the same flags.  A key missing from a row renders as ``NULL``.
    """
    mask = read_only_mask(metadata)
    names = [column.result_name for column in metadata.columns]
    return [
        [
            Cell(value=format_cell_value(row.get(name)), read_only=read_only)
            for name, read_only in zip(names, mask, strict=True)
        ]
        for row in rows
    ]


def copy_snapshot(matrix: CellMatrix) -> CellMatrix:
    """Return an independent deep copy of *matrix*."""
    return [[cell.model_copy() for cell in row] for row in matrix]


def snapshots_aligned(current: CellMatrix, original: CellMatrix) -> bool:
    """Return True if both matrices share dimensions and read-only flags."""
    if len(current) != len(original):
        return False
    for current_row, original_row in zip(current, original, strict=True):
        if len(current_row) != len(original_row):
            return False
        if any(c.read_only != o.read_only for c, o in zip(current_row, original_row, strict=True)):
            return False
    return True
