"""Schema inspection and connection check commands."""

from __future__ import annotations

from typing import Annotated

import typer

from pg_mcp.cli.commands._shared import get_client, get_descriptor, output_json, parse_table_arg
from pg_mcp.core.client import check_connection
from pg_mcp.core.schema import describe_table, list_tables


def tables_command(
    ctx: typer.Context,
    schema: Annotated[
        str | None,
        typer.Option("--schema", "-s", help="Only list tables in this schema"),
    ] = None,
) -> None:
    """List user tables, excluding system schemas."""
    with get_client(ctx) as client:
        tables = list_tables(client, schema)
    output_json({"tables": tables})


def describe_command(
    ctx: typer.Context,
    table: Annotated[
        str,
        typer.Argument(help="Table name, optionally schema-qualified (schema.table)"),
    ],
) -> None:
    """Show columns, indexes and primary key of a table."""
    schema_name, table_name = parse_table_arg(table)
    with get_client(ctx) as client:
        description = describe_table(client, table_name, schema_name)
    output_json(description)


def check_command(ctx: typer.Context) -> None:
    """Test the connection and report server version and latency."""
    descriptor = get_descriptor(ctx)
    check = check_connection(descriptor)
    typer.echo(f"Connected to {descriptor.host}:{descriptor.port}/{check.database} as {check.user}")
    typer.echo(f"Server Version: {check.version}")
    typer.echo(f"Latency: {check.latency_ms}ms")
