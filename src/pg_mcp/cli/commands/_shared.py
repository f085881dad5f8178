"""Shared CLI plumbing for command modules.

Settings resolution, client creation and JSON output.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import typer

from pg_mcp.core.client import PgClient
from pg_mcp.core.config import load_config, resolve_config
from pg_mcp.formatters.json import JSONFormatter

if TYPE_CHECKING:
    from pg_mcp.core.config import ConnectionDescriptor


def get_descriptor(ctx: typer.Context) -> ConnectionDescriptor:
    obj = ctx.ensure_object(dict)
    config = load_config(obj.get("config_file"))

    cli_overrides: dict[str, Any] = {}
    for key in ("host", "port", "database", "user", "password"):
        val = obj.get(key)
        if val is not None:
            cli_overrides[key] = val

    return resolve_config(
        config,
        profile_name=obj.get("profile"),
        dsn=obj.get("dsn"),
        **cli_overrides,
    )


def get_client(ctx: typer.Context) -> PgClient:
    return PgClient(get_descriptor(ctx))


def output_json(payload: Any, compact: bool = False) -> None:
    formatter = JSONFormatter(compact=compact)
    for chunk in formatter.format(payload):
        typer.echo(chunk)


def parse_table_arg(table_arg: str) -> tuple[str, str]:
    if "." in table_arg:
        schema, table = table_arg.split(".", 1)
        return schema, table
    return "public", table_arg
