"""Change-set models produced by diffing two cell snapshots.

These are ephemeral: a fresh set is produced on every diff pass and
discarded after a save resets the original snapshot.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class FieldChange(BaseModel):
    """Before and after values of a single edited field."""

    old_value: str
    new_value: str


class TableChange(BaseModel):
    """One row's edited fields for one table, keyed by its primary-key value."""

    table_name: str = Field(
        ...,
        description="Lower-cased name of the table to update.",
    )
    primary_key_column: str = Field(
        ...,
        description="Result-column name the primary-key value was read from.",
    )
    primary_key_field: str = Field(
        ...,
        description="Stored primary-key field used in the WHERE clause.",
    )
    primary_key_value: str = Field(
        ...,
        description="Current primary-key value of the edited row.",
    )
    changes: dict[str, FieldChange] = Field(
        default_factory=dict,
        description="Edited fields keyed by stored field name, in edit-detection order.",
    )


class RowChanges(BaseModel):
    """All table changes detected in a single grid row."""

    row_index: int = Field(..., ge=0)
    table_changes: list[TableChange] = Field(default_factory=list)


class ChangeSummary(BaseModel):
    """Aggregate counts for a pending change set."""

    total_changes: int = 0
    row_count: int = 0
    table_count: int = 0
