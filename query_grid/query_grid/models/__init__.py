"""Domain models for the query-grid engine."""

from query_grid.models.cells import NULL_SENTINEL, Cell, CellMatrix
from query_grid.models.changes import ChangeSummary, FieldChange, RowChanges, TableChange
from query_grid.models.metadata import ColumnInfo, QueryMetadata, TableRef

__all__ = [
    "NULL_SENTINEL",
    "Cell",
    "CellMatrix",
    "ChangeSummary",
    "ColumnInfo",
    "FieldChange",
    "QueryMetadata",
    "RowChanges",
    "TableChange",
    "TableRef",
]
