"""Query-level and cell-level editability rules.

A query is editable only if it contains none of the constructs that break
the one-result-row-to-one-stored-row correspondence, references at least
one table, and at least one of those tables has a resolved primary key.
Individual cells are then read-only according to :func:`is_cell_read_only`,
which is derived purely from :class:`QueryMetadata` and column position.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from query_grid.models.metadata import ColumnInfo, QueryMetadata, TableRef
from query_grid.parser.normalizer import normalize_whitespace

logger = logging.getLogger(__name__)

NON_EDITABLE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bgroup\s+by\b"),
    re.compile(r"\bhaving\b"),
    re.compile(r"\bunion\b"),
    re.compile(r"\bintersect\b"),
    re.compile(r"\bexcept\b"),
    re.compile(r"\bdistinct\b"),
    re.compile(r"\bcount\s*\("),
    re.compile(r"\bsum\s*\("),
    re.compile(r"\bavg\s*\("),
    re.compile(r"\bmin\s*\("),
    re.compile(r"\bmax\s*\("),
)


def has_non_editable_constructs(sql: str) -> bool:
    """Return True if *sql* aggregates, deduplicates or combines result sets."""
    normalized = normalize_whitespace(sql).lower()
    return any(pattern.search(normalized) for pattern in NON_EDITABLE_PATTERNS)


def classify_query(sql: str, tables: Sequence[TableRef]) -> bool:
    """Return the query-level editability verdict.

    *tables* must already have been through primary-key resolution.
    """
    if has_non_editable_constructs(sql):
        logger.debug("Query not editable: contains a disqualifying construct")
        return False
    if not tables:
        logger.debug("Query not editable: no table resolved")
        return False
    if not any(t.primary_key_column is not None for t in tables):
        logger.debug("Query not editable: no table has a primary key in the result")
        return False
    return True


def _column_read_only(metadata: QueryMetadata, column: ColumnInfo) -> bool:
    if not metadata.is_editable:
        return True
    if column.is_computed or column.is_primary_key or column.table_name is None:
        return True
    table = metadata.table_for(column.table_name)
    return table is None or table.primary_key_column is None


def is_cell_read_only(metadata: QueryMetadata, column_index: int) -> bool:
    """Return True if cells in column *column_index* must not be edited.

    Positions outside the known columns are read-only.
    """
    if not 0 <= column_index < len(metadata.columns):
        return True
    return _column_read_only(metadata, metadata.columns[column_index])


def read_only_mask(metadata: QueryMetadata) -> list[bool]:
    """Return the read-only flag for every column, in result order."""
    return [_column_read_only(metadata, column) for column in metadata.columns]
