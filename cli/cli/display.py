"""Rich output formatting for the query-grid CLI.

All functions write to a :class:`rich.console.Console` instance (typically
bound to *stderr*) so that machine-readable output on *stdout* is never
polluted with human-readable decoration.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

if TYPE_CHECKING:
    from query_grid.models.changes import ChangeSummary, RowChanges
    from query_grid.models.metadata import QueryMetadata
    from query_grid.telemetry.profiling import OperationStats


def _flag(value: bool, label: str) -> str:
    return f"[yellow]{label}[/yellow]" if value else ""


def _editable_label(is_editable: bool) -> str:
    return "[green]editable[/green]" if is_editable else "[red]read-only[/red]"


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------


def display_metadata(console: Console, metadata: QueryMetadata, read_only: Sequence[bool]) -> None:
    """Render the tables, column mapping and editability verdict of a query.

    Parameters
    ----------
    console:
        Rich console to write to (typically stderr).
    metadata:
        Metadata built for the query.
    read_only:
        Per-column read-only flags, in result order.
    """
    header_lines = [
        f"[bold]Result:[/bold]   {_editable_label(metadata.is_editable)}",
        f"[bold]Tables:[/bold]   {len(metadata.tables)}",
        f"[bold]Columns:[/bold]  {len(metadata.columns)}",
    ]
    console.print(Panel("\n".join(header_lines), title="Query Metadata", border_style="blue"))

    if metadata.tables:
        tables = Table(title="Tables", show_lines=False, pad_edge=True, expand=False)
        tables.add_column("#", style="dim", width=4, justify="right")
        tables.add_column("Table", style="bold")
        tables.add_column("Alias")
        tables.add_column("PK Column")
        tables.add_column("PK Field")
        for idx, table in enumerate(metadata.tables, start=1):
            tables.add_row(
                str(idx),
                escape(table.name),
                escape(table.alias or "-"),
                escape(table.primary_key_column) if table.primary_key_column else "[dim]none[/dim]",
                escape(table.primary_key_field),
            )
        console.print(tables)
    else:
        console.print("[dim]No tables found in the query.[/dim]")

    if not metadata.columns:
        console.print("[dim]No result columns.[/dim]")
        return

    columns = Table(title="Columns", show_lines=False, pad_edge=True, expand=False)
    columns.add_column("#", style="dim", width=4, justify="right")
    columns.add_column("Result Column", style="bold")
    columns.add_column("Table")
    columns.add_column("Field")
    columns.add_column("Flags")
    columns.add_column("Editable", justify="center")
    for idx, (column, locked) in enumerate(zip(metadata.columns, read_only, strict=True), start=1):
        flags = " ".join(f for f in (_flag(column.is_primary_key, "pk"), _flag(column.is_computed, "computed")) if f)
        columns.add_row(
            str(idx),
            escape(column.result_name),
            escape(column.table_name) if column.table_name else "[dim]-[/dim]",
            escape(column.field_name),
            flags or "-",
            "[dim]no[/dim]" if locked else "[green]yes[/green]",
        )
    console.print(columns)


# ---------------------------------------------------------------------------
# Changes
# ---------------------------------------------------------------------------


def display_changes(
    console: Console,
    row_changes: Sequence[RowChanges],
    summary: ChangeSummary,
    statements: Sequence[str],
) -> None:
    """Render pending edits and the UPDATE statements that would save them."""
    if not row_changes:
        console.print("[dim]No pending changes.[/dim]")
        return

    plural = "s" if summary.total_changes != 1 else ""
    rows_plural = "s" if summary.row_count != 1 else ""
    console.print(
        f"[bold]{summary.total_changes}[/bold] change{plural} to "
        f"[bold]{summary.row_count}[/bold] row{rows_plural} "
        f"across [bold]{summary.table_count}[/bold] table(s)"
    )

    table = Table(title="Pending Changes", show_lines=False, pad_edge=True, expand=False)
    table.add_column("Row", style="dim", justify="right")
    table.add_column("Table", style="bold")
    table.add_column("Key")
    table.add_column("Field")
    table.add_column("Old")
    table.add_column("New", style="cyan")
    for row in row_changes:
        for table_change in row.table_changes:
            key = f"{table_change.primary_key_field}={table_change.primary_key_value}"
            for field, change in table_change.changes.items():
                table.add_row(
                    str(row.row_index),
                    escape(table_change.table_name),
                    escape(key),
                    escape(field),
                    escape(change.old_value),
                    escape(change.new_value),
                )
    console.print(table)

    console.print()
    console.print("[bold]Statements[/bold] (not wrapped in a transaction):")
    for idx, statement in enumerate(statements, start=1):
        console.print(f"  [dim]{idx}.[/dim] {escape(statement)};")


# ---------------------------------------------------------------------------
# Profiling
# ---------------------------------------------------------------------------


def display_profile(console: Console, stats: Sequence[OperationStats]) -> None:
    """Render per-operation engine timings collected during a command."""
    if not stats:
        console.print("[dim]No profiled operations.[/dim]")
        return

    table = Table(title="Profile", show_lines=False, pad_edge=True, expand=False)
    table.add_column("Operation", style="bold")
    table.add_column("Calls", justify="right")
    table.add_column("Total ms", justify="right")
    table.add_column("Mean ms", justify="right")
    table.add_column("p95 ms", justify="right")
    table.add_column("Max ms", justify="right")
    for entry in stats:
        table.add_row(
            entry.operation,
            str(entry.count),
            f"{entry.total_ms:.3f}",
            f"{entry.mean_ms:.3f}",
            f"{entry.p95_ms:.3f}",
            f"{entry.max_ms:.3f}",
        )
    console.print(table)
