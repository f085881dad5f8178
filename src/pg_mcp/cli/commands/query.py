from __future__ import annotations

import sys
from typing import Annotated

import typer

from pg_mcp.cli.commands._shared import get_client, output_json
from pg_mcp.core.query_source import resolve_query_source
from pg_mcp.formatters.table import TableFormatter


def query_command(
    ctx: typer.Context,
    file: Annotated[
        str | None,
        typer.Argument(help="SQL file to execute"),
    ] = None,
    execute: Annotated[
        str | None,
        typer.Option("--execute", "-e", help="Execute inline SQL query"),
    ] = None,
    param: Annotated[
        list[str] | None,
        typer.Option("--param", "-a", help="Positional parameter for $1, $2, ... (repeatable)"),
    ] = None,
    compact: Annotated[
        bool,
        typer.Option("--compact", help="Compact JSON output (no indentation)"),
    ] = False,
    table: Annotated[
        bool,
        typer.Option("--table", help="Render rows as a table instead of JSON"),
    ] = False,
    width: Annotated[
        int,
        typer.Option("--width", help="Column width for table output"),
    ] = 40,
) -> None:
    """Execute a SQL query from file, inline (-e), or stdin."""
    try:
        is_tty = sys.stdin.isatty()
    except (ValueError, AttributeError):
        is_tty = False
    if execute is None and file is None and is_tty:
        typer.echo(ctx.get_help())
        raise typer.Exit()

    sql = resolve_query_source(inline=execute, file_path=file)

    with get_client(ctx) as client:
        result = client.execute_query(sql, param or [])

    if table:
        for chunk in TableFormatter(width=width).format(result):
            typer.echo(chunk)
    else:
        output_json(result, compact=compact)
