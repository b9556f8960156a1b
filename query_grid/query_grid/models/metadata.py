"""Query metadata models.

These models describe what the introspection pipeline learned about one
executed query: the base tables it reads from, how each result column maps
back onto a stored field, and whether the result grid may be edited at all.

Every model here is frozen.  The pipeline derives updated copies with
``model_copy(update=...)`` while resolving primary keys, and the final
:class:`QueryMetadata` holds them in tuples; it is rebuilt whenever the query
text or its result shape changes.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TableRef(BaseModel):
    """A base table referenced in a FROM or JOIN clause."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(
        ...,
        description="Lower-cased table name with any schema qualifier removed.",
    )
    alias: str | None = Field(
        default=None,
        description="Lower-cased alias, if the clause declared one.",
    )
    primary_key_column: str | None = Field(
        default=None,
        description="Result-column name holding this table's primary key.",
    )
    primary_key_field: str = Field(
        default="id",
        description="Stored field name used in the WHERE clause of updates.",
    )


class ColumnInfo(BaseModel):
    """Mapping of one result column back onto its owning table and field."""

    model_config = ConfigDict(frozen=True)

    result_name: str = Field(
        ...,
        description="Column name as returned by the query.",
    )
    table_name: str | None = Field(
        default=None,
        description="Owning table, or None when it could not be resolved.",
    )
    field_name: str = Field(
        ...,
        description="Stored field name within the owning table.",
    )
    is_computed: bool = Field(
        default=False,
        description="True if the value is derived from an expression.",
    )
    is_primary_key: bool = Field(
        default=False,
        description="True if this column was claimed as a table's primary key.",
    )


class QueryMetadata(BaseModel):
    """Combined table, column and editability facts for one query run."""

    model_config = ConfigDict(frozen=True)

    tables: tuple[TableRef, ...] = Field(
        default_factory=tuple,
        description="FROM table first, then JOIN tables in source order.",
    )
    columns: tuple[ColumnInfo, ...] = Field(
        default_factory=tuple,
        description="Exactly one entry per result column, in result order.",
    )
    is_editable: bool = Field(
        default=False,
        description="True if the query as a whole permits editing.",
    )

    def table_for(self, name: str | None) -> TableRef | None:
        """Return the first table named *name*, or ``None``."""
        if name is None:
            return None
        for table in self.tables:
            if table.name == name:
                return table
        return None

    def column_index(self, result_name: str) -> int | None:
        """Return the position of the first column called *result_name*."""
        for idx, column in enumerate(self.columns):
            if column.result_name == result_name:
                return idx
        return None
