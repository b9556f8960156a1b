"""Unit tests for query_grid.editing.change_tracker."""

from __future__ import annotations

from typing import Any

from query_grid.editing.change_tracker import diff_snapshots, summarize_changes
from query_grid.editing.metadata_builder import build_query_metadata
from query_grid.editing.snapshot import build_snapshot, copy_snapshot
from query_grid.models.cells import Cell
from query_grid.models.changes import RowChanges

JOIN_SQL = "SELECT u.id, u.name, o.id AS order_id, o.status FROM users u JOIN orders o ON o.user_id = u.id"


def _grid(sql: str, rows: list[dict[str, Any]]):
    metadata = build_query_metadata(sql, list(rows[0].keys()))
    original = build_snapshot(rows, metadata)
    return metadata, original, copy_snapshot(original)


def _users():
    return _grid(
        "SELECT * FROM users",
        [
            {"id": 1, "name": "Ada", "email": "ada@example.com"},
            {"id": 2, "name": "Grace", "email": "grace@example.com"},
        ],
    )


# ---------------------------------------------------------------------------
# Grouping
# ---------------------------------------------------------------------------


class TestGrouping:
    def test_no_edits(self):
        metadata, original, current = _users()
        assert diff_snapshots(current, original, metadata) == []

    def test_two_fields_one_table_change(self):
        metadata, original, current = _users()
        current[0][1].value = "Ada L."
        current[0][2].value = "ada@lovelace.org"

        changes = diff_snapshots(current, original, metadata)

        assert len(changes) == 1
        assert changes[0].row_index == 0
        assert len(changes[0].table_changes) == 1
        table_change = changes[0].table_changes[0]
        assert table_change.table_name == "users"
        assert table_change.primary_key_column == "id"
        assert table_change.primary_key_field == "id"
        assert table_change.primary_key_value == "1"
        assert list(table_change.changes) == ["name", "email"]
        assert table_change.changes["name"].old_value == "Ada"
        assert table_change.changes["name"].new_value == "Ada L."

    def test_two_joined_tables_two_table_changes(self):
        metadata, original, current = _grid(
            JOIN_SQL,
            [{"id": 1, "name": "Ada", "order_id": 10, "status": "new"}],
        )
        current[0][1].value = "Ada L."
        current[0][3].value = "shipped"

        changes = diff_snapshots(current, original, metadata)

        assert len(changes) == 1
        by_table = {tc.table_name: tc for tc in changes[0].table_changes}
        assert set(by_table) == {"users", "orders"}
        assert by_table["users"].primary_key_value == "1"
        assert by_table["orders"].primary_key_column == "order_id"
        assert by_table["orders"].primary_key_field == "id"
        assert by_table["orders"].primary_key_value == "10"
        assert list(by_table["orders"].changes) == ["status"]

    def test_changes_keyed_by_field_name(self):
        metadata, original, current = _grid(
            "SELECT u.id, u.name AS user_name FROM users u",
            [{"id": 7, "user_name": "Ada"}],
        )
        current[0][1].value = "Grace"
        table_change = diff_snapshots(current, original, metadata)[0].table_changes[0]
        assert list(table_change.changes) == ["name"]

    def test_each_row_reported_separately(self):
        metadata, original, current = _users()
        current[0][1].value = "A"
        current[1][1].value = "G"
        changes = diff_snapshots(current, original, metadata)
        assert [rc.row_index for rc in changes] == [0, 1]
        assert [rc.table_changes[0].primary_key_value for rc in changes] == ["1", "2"]


# ---------------------------------------------------------------------------
# Skipped and dropped edits
# ---------------------------------------------------------------------------


class TestSkippedEdits:
    def test_non_editable_query(self):
        metadata, original, current = _grid("SELECT DISTINCT id, name FROM users", [{"id": 1, "name": "Ada"}])
        current[0][1].value = "Grace"
        assert diff_snapshots(current, original, metadata) == []

    def test_primary_key_edit_ignored(self):
        metadata, original, current = _users()
        current[0][0].value = "99"
        assert diff_snapshots(current, original, metadata) == []

    def test_read_only_cell_ignored(self):
        metadata, original, current = _users()
        current[0][1].value = "Grace"
        current[0][1].read_only = True
        assert diff_snapshots(current, original, metadata) == []

    def test_empty_key_value_drops_only_that_row(self):
        metadata, original, current = _grid(
            "SELECT * FROM users",
            [{"id": "", "name": "Ada"}, {"id": 2, "name": "Grace"}],
        )
        current[0][1].value = "A"
        current[1][1].value = "G"
        changes = diff_snapshots(current, original, metadata)
        assert [rc.row_index for rc in changes] == [1]

    def test_table_without_key_dropped_rest_of_row_kept(self):
        metadata = build_query_metadata(
            "SELECT u.id, u.name, t.label FROM users u JOIN tags t ON t.user_id = u.id",
            ["id", "name", "label"],
        )
        original = [[Cell(value="1"), Cell(value="Ada"), Cell(value="red")]]
        current = [[Cell(value="1"), Cell(value="Grace"), Cell(value="blue")]]

        changes = diff_snapshots(current, original, metadata)

        assert len(changes) == 1
        assert [tc.table_name for tc in changes[0].table_changes] == ["users"]
        assert list(changes[0].table_changes[0].changes) == ["name"]

    def test_rows_missing_from_either_snapshot_ignored(self):
        metadata, original, current = _users()
        current.append([Cell(value="3", read_only=True), Cell(value="New"), Cell(value="x")])
        current[0][1].value = "A"
        changes = diff_snapshots(current, original, metadata)
        assert [rc.row_index for rc in changes] == [0]


# ---------------------------------------------------------------------------
# Purity
# ---------------------------------------------------------------------------


class TestPurity:
    def test_diff_is_idempotent(self):
        metadata, original, current = _users()
        current[1][2].value = "g@example.com"
        first = diff_snapshots(current, original, metadata)
        second = diff_snapshots(current, original, metadata)
        assert first == second

    def test_inputs_not_mutated(self):
        metadata, original, current = _users()
        current[0][1].value = "A"
        before = ([[c.model_dump() for c in r] for r in current], [[c.model_dump() for c in r] for r in original])
        diff_snapshots(current, original, metadata)
        after = ([[c.model_dump() for c in r] for r in current], [[c.model_dump() for c in r] for r in original])
        assert before == after

    def test_reverted_edit_yields_nothing(self):
        metadata, original, current = _users()
        current[0][1].value = "A"
        current[0][1].value = "Ada"
        assert diff_snapshots(current, original, metadata) == []


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------


class TestSummarizeChanges:
    def test_counts(self):
        metadata, original, current = _grid(
            JOIN_SQL,
            [
                {"id": 1, "name": "Ada", "order_id": 10, "status": "new"},
                {"id": 2, "name": "Grace", "order_id": 11, "status": "new"},
            ],
        )
        current[0][1].value = "Ada L."
        current[0][3].value = "shipped"
        current[1][3].value = "cancelled"

        summary = summarize_changes(diff_snapshots(current, original, metadata))

        assert summary.total_changes == 3
        assert summary.row_count == 2
        assert summary.table_count == 2

    def test_empty(self):
        summary = summarize_changes([])
        assert (summary.total_changes, summary.row_count, summary.table_count) == (0, 0, 0)

    def test_accepts_prebuilt_models(self):
        assert summarize_changes([RowChanges(row_index=0)]).row_count == 1
