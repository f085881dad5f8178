"""MCP tool definitions, argument validation and handlers.

Handlers are synchronous: each one validates its arguments, checks that a
connection is configured, opens a PgClient for the duration of the call and
returns the reply text. Failures are raised as PgMcpError subclasses; the
server turns them into error replies.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from mcp import types

from pg_mcp.core.client import PgClient, check_connection
from pg_mcp.core.config import ConnectionSettings, build_descriptor, parse_dsn
from pg_mcp.core.exceptions import InputError, NoConnectionError, PgMcpError
from pg_mcp.core.models import Primitive, QueryRequest
from pg_mcp.core.schema import describe_table, list_tables
from pg_mcp.formatters import messages

ToolHandler = Callable[[dict[str, Any], ConnectionSettings], str]

NOT_CONFIGURED_MESSAGE = (
    "Database connection not configured. Use configure_connection tool first"
)

TOOLS: list[types.Tool] = [
    types.Tool(
        name="configure_connection",
        description="Configure PostgreSQL database connection settings",
        inputSchema={
            "type": "object",
            "properties": {
                "host": {
                    "type": "string",
                    "description": "Database host (e.g., localhost or a cloud hostname)",
                },
                "port": {"type": "number", "description": "Database port (default: 5432)"},
                "database": {"type": "string", "description": "Database name"},
                "user": {"type": "string", "description": "Database username"},
                "password": {"type": "string", "description": "Database password"},
                "ssl": {
                    "type": "boolean",
                    "description": "Enable SSL connection (required for cloud databases)",
                },
                "connection_string": {
                    "type": "string",
                    "description": "postgresql:// connection URL; replaces the individual fields",
                },
            },
        },
    ),
    types.Tool(
        name="get_connection_info",
        description="Get current database connection configuration",
        inputSchema={"type": "object", "properties": {}},
    ),
    types.Tool(
        name="test_connection",
        description="Test the current database connection",
        inputSchema={"type": "object", "properties": {}},
    ),
    types.Tool(
        name="execute_query",
        description="Execute a SQL query against the configured PostgreSQL database",
        inputSchema={
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "SQL query to execute"},
                "params": {
                    "type": "array",
                    "description": "Query parameters for parameterized queries ($1, $2, ...)",
                    "items": {"type": ["string", "number", "boolean", "null"]},
                },
            },
            "required": ["query"],
        },
    ),
    types.Tool(
        name="list_tables",
        description="List all tables in the configured PostgreSQL database or a specific schema",
        inputSchema={
            "type": "object",
            "properties": {
                "schema": {
                    "type": "string",
                    "description": "Schema name to filter by (optional - lists all schemas if not provided)",
                },
            },
        },
    ),
    types.Tool(
        name="describe_table",
        description="Get detailed information about a table structure in the configured PostgreSQL database",
        inputSchema={
            "type": "object",
            "properties": {
                "table": {"type": "string", "description": "Table name"},
                "schema": {"type": "string", "description": 'Schema name (default: "public")'},
            },
            "required": ["table"],
        },
    ),
]


# ---------------------------------------------------------------------------
# Argument validation
# ---------------------------------------------------------------------------


def require_string(args: dict[str, Any], name: str) -> str:
    value = args.get(name)
    if not value or not isinstance(value, str):
        raise InputError(f"{name} is required and must be a string")
    return value


def optional_string(args: dict[str, Any], name: str) -> str | None:
    value = args.get(name)
    if value is not None and not isinstance(value, str):
        raise InputError(f"{name} must be a string")
    return value or None


def validate_params(value: Any) -> list[Primitive]:
    """Check that query parameters are a list of string/number/boolean/null."""
    if value is None:
        return []
    if not isinstance(value, list):
        raise InputError("params must be an array")
    for param in value:
        if param is not None and not isinstance(param, (str, int, float, bool)):
            raise InputError("Query parameters must be string, number, boolean, or null")
    return value


def require_configured(settings: ConnectionSettings) -> None:
    if not settings.is_configured():
        raise NoConnectionError(NOT_CONFIGURED_MESSAGE)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def handle_configure_connection(args: dict[str, Any], settings: ConnectionSettings) -> str:
    fields: dict[str, Any]
    connection_string = optional_string(args, "connection_string")
    if connection_string:
        fields = parse_dsn(connection_string)
    else:
        missing = [k for k in ("host", "database", "user", "password") if not args.get(k)]
        if missing:
            raise InputError(
                "Invalid parameters: host, database, user, and password are required"
            )
        fields = {
            "host": require_string(args, "host"),
            "database": require_string(args, "database"),
            "user": require_string(args, "user"),
            "password": require_string(args, "password"),
        }
        port = args.get("port")
        if port is not None:
            if isinstance(port, bool) or not isinstance(port, (int, float)) or port != int(port):
                raise InputError("port must be an integer")
            fields["port"] = int(port)

    ssl = args.get("ssl")
    if ssl is not None and not isinstance(ssl, bool):
        raise InputError("ssl must be a boolean")
    if ssl is not None or "sslmode" not in fields:
        fields["sslmode"] = "disable" if ssl is False else "require"

    current = settings.descriptor
    fields.setdefault("connect_timeout", current.connect_timeout)
    fields.setdefault("statement_timeout", current.statement_timeout)
    fields["sources"] = dict.fromkeys(
        ("host", "port", "database", "user", "password", "sslmode"), "tool: configure_connection"
    )
    descriptor = build_descriptor(**fields)
    settings.update(descriptor)

    try:
        check = check_connection(descriptor)
    except PgMcpError as e:
        return messages.configuration_saved(descriptor, None, e)
    return messages.configuration_saved(descriptor, check, None)


def handle_get_connection_info(args: dict[str, Any], settings: ConnectionSettings) -> str:
    return messages.connection_info(settings.descriptor)


def handle_test_connection(args: dict[str, Any], settings: ConnectionSettings) -> str:
    require_configured(settings)
    descriptor = settings.descriptor
    check = check_connection(descriptor)
    return messages.connection_test_passed(descriptor, check)


def handle_execute_query(args: dict[str, Any], settings: ConnectionSettings) -> str:
    request = QueryRequest(
        sql=require_string(args, "query"),
        params=validate_params(args.get("params")),
    )
    require_configured(settings)

    with PgClient(settings.descriptor) as client:
        result = client.execute_query(request.sql, request.params)
    return messages.query_results(result)


def handle_list_tables(args: dict[str, Any], settings: ConnectionSettings) -> str:
    schema = optional_string(args, "schema")
    require_configured(settings)

    with PgClient(settings.descriptor) as client:
        tables = list_tables(client, schema)
    return messages.table_list(tables)


def handle_describe_table(args: dict[str, Any], settings: ConnectionSettings) -> str:
    table = require_string(args, "table")
    schema = optional_string(args, "schema") or "public"
    require_configured(settings)

    with PgClient(settings.descriptor) as client:
        description = describe_table(client, table, schema)
    return messages.table_structure(description)


HANDLERS: dict[str, ToolHandler] = {
    "configure_connection": handle_configure_connection,
    "get_connection_info": handle_get_connection_info,
    "test_connection": handle_test_connection,
    "execute_query": handle_execute_query,
    "list_tables": handle_list_tables,
    "describe_table": handle_describe_table,
}


def dispatch(name: str, arguments: dict[str, Any] | None, settings: ConnectionSettings) -> str:
    """Run tool ``name`` and return its reply text."""
    handler = HANDLERS.get(name)
    if handler is None:
        raise InputError(f"Unknown tool: {name}")
    return handler(arguments or {}, settings)
