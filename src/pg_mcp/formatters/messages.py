"""Reply texts for MCP tool calls.

Each function returns the text block sent back to the client. Payloads are
pretty-printed JSON under a one-line heading.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pg_mcp.formatters.json import JSONFormatter

if TYPE_CHECKING:
    from pg_mcp.core.config import ConnectionDescriptor
    from pg_mcp.core.exceptions import PgMcpError
    from pg_mcp.core.models import (
        ConnectionCheck,
        QueryResult,
        TableDescription,
        TableSummary,
    )

_json = JSONFormatter()


def query_results(result: QueryResult) -> str:
    return f"📊 Query Results\n\n{_json.render(result)}"


def table_list(tables: list[TableSummary]) -> str:
    return f"🗄️ Tables in Database\n\n{_json.render({'tables': tables})}"


def table_structure(description: TableDescription) -> str:
    return f"📝 Table Structure\n\n{_json.render(description)}"


def connection_details(descriptor: ConnectionDescriptor) -> str:
    return (
        "📋 Configuration Details:\n"
        f"- Host: {descriptor.host}:{descriptor.port}\n"
        f"- Database: {descriptor.database}\n"
        f"- User: {descriptor.user}\n"
        f"- SSL: {'enabled' if descriptor.ssl else 'disabled'}"
    )


def connection_info(descriptor: ConnectionDescriptor) -> str:
    info = {
        "host": descriptor.host,
        "port": descriptor.port,
        "database": descriptor.database,
        "user": descriptor.user,
        "ssl": descriptor.ssl,
        "sslmode": descriptor.sslmode,
        "password_configured": bool(descriptor.password),
        "configured": descriptor.is_configured,
    }
    return f"📋 Current PostgreSQL Configuration\n\n{_json.render(info)}"


def connection_test_passed(descriptor: ConnectionDescriptor, check: ConnectionCheck) -> str:
    return (
        "✅ Connection Test Successful!\n\n"
        "Connection Details:\n"
        f"- Host: {descriptor.host}:{descriptor.port}\n"
        f"- Database: {check.database}\n"
        f"- User: {check.user}\n"
        f"- SSL: {'enabled' if descriptor.ssl else 'disabled'}\n"
        f"- Server Version: {check.version}\n"
        f"- Connection Latency: {check.latency_ms}ms"
    )


def configuration_saved(
    descriptor: ConnectionDescriptor,
    check: ConnectionCheck | None,
    error: PgMcpError | None,
) -> str:
    if check is not None:
        status = (
            "✅ Connection successful\n"
            f"- Server Version: {check.version}\n"
            f"- Connection Latency: {check.latency_ms}ms"
        )
    else:
        reason = f"{error.code}: {error.message}" if error is not None else "unknown error"
        status = f"⚠️ Connection test failed: {reason}"
    return (
        "🔧 PostgreSQL Configuration\n\n"
        f"{connection_details(descriptor)}\n\n"
        f"{status}\n\n"
        "ℹ️ Configuration kept in memory for this server session"
    )


def error_reply(error: PgMcpError) -> str:
    return f"❌ {error.code}: {error.message}\n\n{_json.render(error.to_response())}"
