"""Grid cell model.

A result grid is held as a row-major matrix of :class:`Cell`.  Two matrices
exist per query run: the *original* captured right after execution and the
*current* one mutated by user edits.  Both always share dimensions and
read-only flags; only ``value`` may differ between them.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

NULL_SENTINEL = "NULL"


class Cell(BaseModel):
    """A single grid cell."""

    value: str = Field(
        default="",
        description="Display value; the string 'NULL' stands for a database NULL.",
    )
    read_only: bool = Field(
        default=False,
        description="True if the grid must not allow editing this cell.",
    )


CellMatrix = list[list[Cell]]
