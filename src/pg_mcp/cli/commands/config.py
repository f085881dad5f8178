"""Configuration management CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

import typer

from pg_mcp.cli.commands._shared import get_descriptor
from pg_mcp.core.config import DEFAULT_CONFIG_PATH

if TYPE_CHECKING:
    from pathlib import Path

config_app = typer.Typer(help="Configuration management commands")


@config_app.callback(invoke_without_command=True)
def config_callback(ctx: typer.Context) -> None:
    if not ctx.invoked_subcommand:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _mask_password(value: str | None) -> str:
    if not value:
        return "not set"
    return "***"


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Display resolved configuration with source attribution."""
    descriptor = get_descriptor(ctx)
    sources = descriptor.sources

    typer.echo("Connection Settings (resolved):")
    connection_fields = [
        ("host", descriptor.host),
        ("port", str(descriptor.port)),
        ("database", descriptor.database),
        ("user", descriptor.user),
        ("password", _mask_password(descriptor.password)),
        ("sslmode", descriptor.sslmode),
    ]
    for field_name, value in connection_fields:
        source = sources.get(field_name, "default")
        typer.echo(f"  {field_name}: {value} ({source})")

    typer.echo("")
    typer.echo("Timeouts:")
    for field_name in ("connect_timeout", "statement_timeout"):
        source = sources.get(field_name, "default")
        typer.echo(f"  {field_name}: {getattr(descriptor, field_name)}s ({source})")

    typer.echo("")
    typer.echo(f"Active Profile: {descriptor.active_profile or 'none'}")

    config_path: Path | None = ctx.obj.get("config_file")
    typer.echo(f"Config File: {config_path or DEFAULT_CONFIG_PATH}")
