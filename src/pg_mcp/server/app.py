"""MCP server over stdio.

Registers the six tools on a low-level ``mcp`` Server. Tool handlers are
blocking psycopg code, so each call runs on a worker thread; the event loop
only moves JSON-RPC frames. stdout carries the protocol, logs go to stderr.
"""

from __future__ import annotations

import asyncio
from typing import Any

import sentry_sdk
from mcp import types
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from mcp.server.stdio import stdio_server

from pg_mcp import __version__
from pg_mcp.core.config import ConnectionSettings
from pg_mcp.core.exceptions import ErrorCode, PgMcpError
from pg_mcp.core.logging import get_logger
from pg_mcp.formatters import messages
from pg_mcp.server.tools import TOOLS, dispatch

SERVER_NAME = "pg-mcp"


class ToolCallError(Exception):
    """Raised from the call_tool handler; the SDK reports it as an error result."""


def create_server(settings: ConnectionSettings) -> Server:
    app: Server = Server(SERVER_NAME)

    @app.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        return list(TOOLS)

    @app.call_tool(validate_input=False)
    async def handle_call_tool(
        name: str, arguments: dict[str, Any] | None
    ) -> list[types.TextContent]:
        log = get_logger("pg_mcp.server").bind(tool=name)
        log.info("tool call")
        with sentry_sdk.start_transaction(op="mcp.tool", name=name):
            try:
                text = await asyncio.to_thread(dispatch, name, arguments, settings)
            except PgMcpError as e:
                log.warning("tool failed", code=str(e.code), error=e.message)
                if e.code not in (ErrorCode.INVALID_PARAMS, ErrorCode.NO_CONNECTION):
                    sentry_sdk.capture_exception(e)
                raise ToolCallError(messages.error_reply(e)) from e
        return [types.TextContent(type="text", text=text)]

    return app


async def run_stdio(settings: ConnectionSettings) -> None:
    """Serve MCP over stdin/stdout until the client disconnects."""
    log = get_logger("pg_mcp.server")
    app = create_server(settings)
    descriptor = settings.descriptor
    log.info(
        "server starting",
        version=__version__,
        host=descriptor.host,
        port=descriptor.port,
        database=descriptor.database,
        configured=descriptor.is_configured,
    )
    async with stdio_server() as (read_stream, write_stream):
        await app.run(
            read_stream,
            write_stream,
            InitializationOptions(
                server_name=SERVER_NAME,
                server_version=__version__,
                capabilities=app.get_capabilities(
                    notification_options=NotificationOptions(),
                    experimental_capabilities={},
                ),
            ),
        )
    log.info("server stopped")
