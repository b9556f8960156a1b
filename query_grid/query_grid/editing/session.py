"""Edit session holding one query run's metadata and snapshot pair.

The session is a convenience for hosts that do not want to manage the two
snapshots themselves.  It never executes anything: the caller runs the
statements from :meth:`EditSession.statements` (in order, with whatever
transaction policy it needs) and then calls :meth:`EditSession.mark_saved`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from query_grid.editing.change_tracker import diff_snapshots, summarize_changes
from query_grid.editing.editability import is_cell_read_only
from query_grid.editing.mutation import DEFAULT_JSON_CAST, generate_statements
from query_grid.editing.snapshot import build_snapshot, copy_snapshot, snapshots_aligned
from query_grid.exceptions import ReadOnlyCellError, SnapshotShapeError
from query_grid.models.cells import CellMatrix
from query_grid.models.changes import ChangeSummary, RowChanges
from query_grid.models.metadata import QueryMetadata

logger = logging.getLogger(__name__)


class EditSession:
    """Tracks user edits against the snapshot captured after a query run.

    Parameters
    ----------
    metadata:
        Metadata built for the query that produced the snapshots.
    original:
        Snapshot captured immediately after the run.
    current:
        Working snapshot; defaults to a copy of *original*.
    json_cast:
        Cast type appended to JSON literals in generated statements.

    Raises
    ------
    SnapshotShapeError
        If *current* and *original* differ in shape or read-only flags.
    """

    def __init__(
        self,
        metadata: QueryMetadata,
        original: CellMatrix,
        current: CellMatrix | None = None,
        *,
        json_cast: str = DEFAULT_JSON_CAST,
    ) -> None:
        if current is None:
            current = copy_snapshot(original)
        elif not snapshots_aligned(current, original):
            raise SnapshotShapeError("current and original snapshots differ in shape or read-only flags")

        self.metadata = metadata
        self._original = original
        self._current = current
        self._json_cast = json_cast

    @classmethod
    def from_rows(
        cls,
        metadata: QueryMetadata,
        rows: Iterable[Mapping[str, Any]],
        *,
        json_cast: str = DEFAULT_JSON_CAST,
    ) -> EditSession:
        """Start a session from freshly fetched result rows."""
        return cls(metadata, build_snapshot(rows, metadata), json_cast=json_cast)

    @property
    def original(self) -> CellMatrix:
        return self._original

    @property
    def current(self) -> CellMatrix:
        return self._current

    @property
    def row_count(self) -> int:
        return len(self._current)

    def set_value(self, row: int, column: int, value: str) -> None:
        """Apply a user edit to the current snapshot.

        Raises
        ------
        IndexError
            If *row* or *column* is outside the grid.
        ReadOnlyCellError
            If the target cell must not be edited.
        """
        if not 0 <= row < len(self._current) or not 0 <= column < len(self._current[row]):
            raise IndexError(f"No cell at row {row}, column {column}")

        cell = self._current[row][column]
        if cell.read_only or is_cell_read_only(self.metadata, column):
            name = self.metadata.columns[column].result_name if column < len(self.metadata.columns) else None
            raise ReadOnlyCellError(row, column, name)

        cell.value = value

    def discard(self) -> None:
        """Throw away all edits by restoring current from original."""
        self._current = copy_snapshot(self._original)

    def changes(self) -> list[RowChanges]:
        return diff_snapshots(self._current, self._original, self.metadata)

    def summary(self) -> ChangeSummary:
        return summarize_changes(self.changes())

    def has_changes(self) -> bool:
        return bool(self.changes())

    def statements(self) -> list[str]:
        """Return the ordered UPDATE statements for all pending edits."""
        return generate_statements(self.changes(), json_cast=self._json_cast)

    def mark_saved(self) -> None:
        """Record that the pending statements were executed successfully."""
        self._original = copy_snapshot(self._current)
        logger.debug("Edit session saved; original snapshot reset")

    def values(self, which: str = "current") -> list[list[str]]:
        """Return the plain cell values of the ``current`` or ``original`` snapshot."""
        if which not in ("current", "original"):
            raise ValueError(f"Unknown snapshot {which!r}")
        matrix = self._current if which == "current" else self._original
        return [[cell.value for cell in row] for row in matrix]
