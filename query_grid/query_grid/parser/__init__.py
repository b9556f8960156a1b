"""Query-text heuristics: table extraction, column mapping, key resolution."""

from query_grid.parser.column_mapper import COMPUTED_FUNCTIONS, is_computed_column, map_columns
from query_grid.parser.normalizer import normalize_whitespace
from query_grid.parser.primary_keys import PRIMARY_KEY_CANDIDATES, resolve_primary_keys
from query_grid.parser.table_extractor import (
    extract_primary_table_name,
    extract_tables,
    parse_table_reference,
)

__all__ = [
    "COMPUTED_FUNCTIONS",
    "PRIMARY_KEY_CANDIDATES",
    "extract_primary_table_name",
    "extract_tables",
    "is_computed_column",
    "map_columns",
    "normalize_whitespace",
    "parse_table_reference",
    "resolve_primary_keys",
]
