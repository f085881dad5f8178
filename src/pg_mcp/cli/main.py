"""pg-mcp main entry point and command registration."""

from __future__ import annotations

import asyncio
import atexit
from pathlib import Path  # noqa: TC003
from typing import Annotated

import sentry_sdk
import typer

from pg_mcp.__about__ import __version__
from pg_mcp.cli.commands._shared import get_descriptor
from pg_mcp.cli.commands.config import config_app
from pg_mcp.cli.commands.query import query_command
from pg_mcp.cli.commands.schema import check_command, describe_command, tables_command
from pg_mcp.core.config import ConnectionSettings
from pg_mcp.core.exceptions import PgMcpError
from pg_mcp.core.logging import setup_logging
from pg_mcp.core.monitoring import setup_sentry
from pg_mcp.server.app import run_stdio

app = typer.Typer(
    help="pg-mcp - PostgreSQL MCP server and query tool",
)

app.add_typer(config_app, name="config")
app.command("query")(query_command)
app.command("tables")(tables_command)
app.command("describe")(describe_command)
app.command("check")(check_command)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"pg-mcp {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable verbose logging"),
    ] = False,
    profile: Annotated[
        str | None,
        typer.Option("--profile", "-P", help="Named connection profile"),
    ] = None,
    host: Annotated[
        str | None,
        typer.Option("--host", "-H", help="PostgreSQL host"),
    ] = None,
    port: Annotated[
        int | None,
        typer.Option("--port", "-p", help="PostgreSQL port"),
    ] = None,
    database: Annotated[
        str | None,
        typer.Option("--database", "-d", help="Database name"),
    ] = None,
    user: Annotated[
        str | None,
        typer.Option("--user", "-U", help="User name"),
    ] = None,
    password: Annotated[
        str | None,
        typer.Option("--password", "-W", help="Password"),
    ] = None,
    dsn: Annotated[
        str | None,
        typer.Option("--dsn", help="Connection DSN (postgresql://...)"),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config file"),
    ] = None,
) -> None:
    """pg-mcp - PostgreSQL MCP server and query tool.

    Without a command, serves MCP over stdio.
    """
    setup_logging(verbose)
    setup_sentry()

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["profile"] = profile
    ctx.obj["host"] = host
    ctx.obj["port"] = port
    ctx.obj["database"] = database
    ctx.obj["user"] = user
    ctx.obj["password"] = password
    ctx.obj["dsn"] = dsn
    ctx.obj["config_file"] = config_file

    if ctx.invoked_subcommand is None:
        serve(ctx)
        return
    if ctx.invoked_subcommand == "serve":
        return

    transaction = sentry_sdk.start_transaction(op="cli", name=ctx.invoked_subcommand)
    transaction.__enter__()

    def cleanup() -> None:
        transaction.__exit__(None, None, None)
        sentry_sdk.flush(timeout=2)

    atexit.register(cleanup)


@app.command("serve")
def serve(ctx: typer.Context) -> None:
    """Run the MCP server on stdin/stdout."""
    settings = ConnectionSettings(get_descriptor(ctx))
    asyncio.run(run_stdio(settings))


def run() -> None:
    """Entry point with global error handling."""
    try:
        app()
    except PgMcpError as e:
        sentry_sdk.capture_exception(e)
        typer.echo(f"Error [{e.code}]: {e.message}", err=True)
        raise SystemExit(e.exit_code) from None
    except SystemExit:
        raise
    except KeyboardInterrupt:
        raise SystemExit(130) from None
    except Exception as e:
        sentry_sdk.capture_exception(e)
        typer.echo(f"Error: {e}", err=True)
        raise SystemExit(1) from None
