"""query-grid CLI application -- Typer-based developer interface.

Inspects how the engine classifies a query's result grid and previews the
UPDATE statements an edited grid would produce.  Nothing is ever executed
against a database.  Human-readable output goes to *stderr* via Rich;
``--json`` writes machine-readable output to *stdout*.

Result rows are read from JSON files holding a list of objects keyed by
result-column name, in the shape most drivers return them.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import typer
from rich.console import Console

from cli.display import display_changes, display_metadata, display_profile
from query_grid.config import Settings, load_settings
from query_grid.editing import (
    EditSession,
    MetadataCache,
    build_query_metadata,
    build_snapshot,
    read_only_mask,
)
from query_grid.exceptions import QueryGridError
from query_grid.logging_config import configure_logging
from query_grid.models.metadata import QueryMetadata
from query_grid.telemetry.profiling import ProfileCollector

# ---------------------------------------------------------------------------
# App & global state
# ---------------------------------------------------------------------------

app = typer.Typer(
    name="query-grid",
    help="query-grid - editable result-grid introspection and UPDATE synthesis",
    no_args_is_help=True,
)
console = Console(stderr=True)

# Mutable global options populated by the Typer callback.
_json_output: bool = False
_settings: Settings | None = None
_cache: MetadataCache | None = None


# ---------------------------------------------------------------------------
# Callback -- global options
# ---------------------------------------------------------------------------


@app.callback()
def _global_options(
    ctx: typer.Context,
    json_mode: bool = typer.Option(
        False,
        "--json/--no-json",
        help="Emit structured JSON to stdout instead of human-readable output.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable DEBUG logging (also QUERY_GRID_DEBUG).",
    ),
    profile: bool = typer.Option(
        False,
        "--profile",
        help="Print engine timings to stderr after the command finishes.",
    ),
) -> None:
    """Global options applied to every command."""
    global _json_output, _settings, _cache  # noqa: PLW0603
    _json_output = json_mode

    overrides: dict[str, Any] = {"debug": True} if debug else {}
    try:
        _settings = load_settings(**overrides)
    except ValueError as exc:
        console.print(f"[red]Invalid configuration: {exc}[/red]")
        raise typer.Exit(code=3) from exc

    configure_logging(_settings)
    _cache = MetadataCache(
        max_entries=_settings.metadata_cache_max_entries,
        enabled=_settings.metadata_cache_enabled,
    )

    if profile:
        ProfileCollector.reset()
        ctx.call_on_close(lambda: display_profile(console, ProfileCollector.get_instance().all_stats()))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _current_settings() -> Settings:
    return _settings if _settings is not None else load_settings()


def _read_sql(sql: str) -> str:
    """Return *sql*, or the contents of the file when given as ``@path``."""
    if not sql.startswith("@"):
        return sql
    path = Path(sql[1:])
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        console.print(f"[red]Failed to read SQL file {path}: {exc}[/red]")
        raise typer.Exit(code=3) from exc


def _load_rows(path: Path) -> list[dict[str, Any]]:
    """Load a JSON list of result-row objects from *path*."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        console.print(f"[red]Failed to read rows from {path}: {exc}[/red]")
        raise typer.Exit(code=3) from exc

    if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
        console.print(f"[red]{path} must contain a JSON list of objects.[/red]")
        raise typer.Exit(code=3)
    return data


def _metadata_json(metadata: QueryMetadata, read_only: list[bool]) -> dict[str, Any]:
    payload = metadata.model_dump()
    for column, locked in zip(payload["columns"], read_only, strict=True):
        column["read_only"] = locked
    return payload


# ---------------------------------------------------------------------------
# inspect
# ---------------------------------------------------------------------------


@app.command()
def inspect(
    sql: str = typer.Argument(
        ...,
        help="Query text, or @path to read it from a file.",
    ),
    column: list[str] | None = typer.Option(
        None,
        "--column",
        "-c",
        help="Result column name, in result order (repeatable).",
    ),
    rows_path: Path | None = typer.Option(
        None,
        "--rows",
        help="JSON result rows; result columns are taken from the first row.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
) -> None:
    """Show which tables, keys and cells of a query's result are editable."""
    query = _read_sql(sql)

    result_columns = list(column or [])
    if rows_path is not None:
        rows = _load_rows(rows_path)
        if rows:
            result_columns = list(rows[0].keys())

    if not result_columns:
        console.print("[red]No result columns given; use --column or --rows.[/red]")
        raise typer.Exit(code=3)

    metadata = build_query_metadata(query, result_columns, cache=_cache)
    read_only = read_only_mask(metadata)

    if _json_output:
        sys.stdout.write(json.dumps(_metadata_json(metadata, read_only), indent=2) + "\n")
    else:
        display_metadata(console, metadata, read_only)


# ---------------------------------------------------------------------------
# diff
# ---------------------------------------------------------------------------


@app.command()
def diff(
    sql: str = typer.Argument(
        ...,
        help="Query text that produced the rows, or @path to read it from a file.",
    ),
    original_path: Path = typer.Option(
        ...,
        "--original",
        help="JSON result rows as fetched.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
    current_path: Path = typer.Option(
        ...,
        "--current",
        help="JSON result rows after editing.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
    out: Path | None = typer.Option(
        None,
        "--out",
        "-o",
        help="Write the UPDATE statements to this .sql file.",
    ),
) -> None:
    """Preview the UPDATE statements that would save an edited result grid."""
    query = _read_sql(sql)
    original_rows = _load_rows(original_path)
    current_rows = _load_rows(current_path)

    if not original_rows:
        console.print("[yellow]No original rows; nothing to compare.[/yellow]")
        raise typer.Exit(code=0)

    settings = _current_settings()
    metadata = build_query_metadata(query, list(original_rows[0].keys()), cache=_cache)
    if not metadata.is_editable:
        console.print("[yellow]Query result is not editable; no statements generated.[/yellow]")

    try:
        session = EditSession(
            metadata,
            build_snapshot(original_rows, metadata),
            build_snapshot(current_rows, metadata),
            json_cast=settings.json_cast,
        )
        row_changes = session.changes()
        summary = session.summary()
        statements = session.statements()
    except QueryGridError as exc:
        console.print(f"[red]Cannot compare rows: {exc}[/red]")
        raise typer.Exit(code=3) from exc

    if out is not None:
        try:
            out.write_text("".join(f"{s};\n" for s in statements), encoding="utf-8")
        except OSError as exc:
            console.print(f"[red]Failed to write {out}: {exc}[/red]")
            raise typer.Exit(code=3) from exc
        console.print(f"[green]Wrote {len(statements)} statement(s) to {out}[/green]")

    if _json_output:
        payload = {
            "is_editable": metadata.is_editable,
            "summary": summary.model_dump(),
            "changes": [row.model_dump() for row in row_changes],
            "statements": statements,
        }
        sys.stdout.write(json.dumps(payload, indent=2) + "\n")
    else:
        display_changes(console, row_changes, summary, statements)
