"""End-to-end construction of :class:`QueryMetadata` for one query run."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from query_grid.editing.cache import MetadataCache
from query_grid.editing.editability import classify_query
from query_grid.models.metadata import QueryMetadata
from query_grid.parser.column_mapper import map_columns
from query_grid.parser.primary_keys import resolve_primary_keys
from query_grid.parser.table_extractor import extract_tables
from query_grid.telemetry.profiling import profile_operation

logger = logging.getLogger(__name__)


@profile_operation("metadata.build")
def build_query_metadata(
    sql: str,
    result_columns: Sequence[str],
    *,
    cache: MetadataCache | None = None,
) -> QueryMetadata:
    """Derive table, column, primary-key and editability facts for *sql*.

    Parameters
    ----------
    sql:
        The query text exactly as it was executed.
    result_columns:
        Ordered result-column names reported by the execution step.
    cache:
        Optional :class:`MetadataCache`.  When given, an identical query
        with an identical result shape is served from it.

    Returns
    -------
    QueryMetadata
        Frozen metadata; never raises for any string input.
    """
    if cache is not None:
        cached = cache.get(sql, result_columns)
        if cached is not None:
            return cached

    tables = extract_tables(sql)
    columns = map_columns(sql, result_columns, tables)
    tables, columns = resolve_primary_keys(columns, tables)
    is_editable = classify_query(sql, tables)

    metadata = QueryMetadata(tables=tuple(tables), columns=tuple(columns), is_editable=is_editable)
    logger.debug(
        "Built metadata: %d table(s), %d column(s), editable=%s",
        len(metadata.tables),
        len(metadata.columns),
        metadata.is_editable,
    )

    if cache is not None:
        cache.put(sql, result_columns, metadata)
    return metadata
