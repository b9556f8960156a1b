"""Editability classification, change tracking and UPDATE synthesis."""

from query_grid.editing.cache import MetadataCache
from query_grid.editing.change_tracker import diff_snapshots, summarize_changes
from query_grid.editing.editability import (
    classify_query,
    has_non_editable_constructs,
    is_cell_read_only,
    read_only_mask,
)
from query_grid.editing.metadata_builder import build_query_metadata
from query_grid.editing.mutation import (
    encode_literal,
    generate_statements,
    generate_update_sql,
    quote_identifier,
)
from query_grid.editing.session import EditSession
from query_grid.editing.snapshot import build_snapshot, copy_snapshot, format_cell_value

__all__ = [
    "EditSession",
    "MetadataCache",
    "build_query_metadata",
    "build_snapshot",
    "classify_query",
    "copy_snapshot",
    "diff_snapshots",
    "encode_literal",
    "format_cell_value",
    "generate_statements",
    "generate_update_sql",
    "has_non_editable_constructs",
    "is_cell_read_only",
    "quote_identifier",
    "read_only_mask",
    "summarize_changes",
]
