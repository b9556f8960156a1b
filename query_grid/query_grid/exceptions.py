"""Exception hierarchy for the query-grid engine.

Query analysis and snapshot diffing never raise for well-typed input; a
query that cannot be edited is a classification result, not an error.
The exceptions below cover caller misuse only.
"""

from __future__ import annotations


class QueryGridError(Exception):
    """Base class for all query-grid errors."""


class ReadOnlyCellError(QueryGridError):
    """Raised when an edit targets a cell the grid must keep read-only."""

    def __init__(self, row: int, column: int, column_name: str | None = None) -> None:
        self.row = row
        self.column = column
        self.column_name = column_name
        label = f" ({column_name})" if column_name else ""
        super().__init__(f"Cell at row {row}, column {column}{label} is read-only")


class SnapshotShapeError(QueryGridError):
    """Raised when the original and current snapshots do not line up."""


class MutationError(QueryGridError):
    """Raised when a table change cannot be rendered as a write statement."""
