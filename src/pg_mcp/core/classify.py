"""Map engine failures onto the pg-mcp error taxonomy.

Classification is driven by the engine's message text, with the SQLSTATE
code as a second signal when the driver exposes one. Query failures are
checked in a fixed order: permission, missing object, syntax, statement
timeout, then the generic QUERY_ERROR fallback.
"""

from __future__ import annotations

from typing import Any

from pg_mcp.core.exceptions import (
    AuthenticationError,
    ConfigError,
    ErrorCode,
    NetworkError,
    PermissionDeniedError,
    PgMcpError,
    QueryError,
    TableNotFoundError,
    TimeoutError,
)

QUERY_PREFIX_LENGTH = 100

_PERMISSION_STATES = frozenset({"42501"})
_MISSING_OBJECT_STATES = frozenset({"42P01", "42703", "42883", "42704", "3F000", "3D000"})
_SYNTAX_STATES = frozenset({"42601"})
_TIMEOUT_STATES = frozenset({"57014"})
_AUTH_STATES = frozenset({"28P01", "28000"})

_TIMEOUT_PHRASES = ("statement timeout", "canceling statement due to")
_AUTH_PHRASES = ("password authentication failed", "authentication failed", "no password supplied")
_CONNECT_TIMEOUT_PHRASES = ("timeout expired", "timed out")
_CONNINFO_PHRASES = ("invalid dsn", "invalid connection option", "missing \"=\"", "invalid integer value")


def error_message(exc: BaseException) -> str:
    """Primary engine message for ``exc``, falling back to ``str(exc)``."""
    diag = getattr(exc, "diag", None)
    primary = getattr(diag, "message_primary", None) if diag is not None else None
    if isinstance(primary, str) and primary:
        return primary
    return str(exc)


def truncate_query(sql: str) -> str:
    return sql[:QUERY_PREFIX_LENGTH]


def _is_syntax_error(text: str, sqlstate: str | None) -> bool:
    return "syntax error" in text or sqlstate in _SYNTAX_STATES


def classify_message(message: str, sqlstate: str | None = None) -> ErrorCode:
    """Classify a query failure by message text and optional SQLSTATE."""
    text = message.lower()
    if "permission denied" in text or sqlstate in _PERMISSION_STATES:
        return ErrorCode.PERMISSION_DENIED
    if "does not exist" in text or sqlstate in _MISSING_OBJECT_STATES:
        return ErrorCode.TABLE_NOT_FOUND
    if _is_syntax_error(text, sqlstate):
        return ErrorCode.QUERY_ERROR
    if any(p in text for p in _TIMEOUT_PHRASES) or sqlstate in _TIMEOUT_STATES:
        return ErrorCode.TIMEOUT
    return ErrorCode.QUERY_ERROR


def classify_query_error(exc: BaseException, sql: str, elapsed_ms: int) -> PgMcpError:
    """Build the classified exception for a failed statement.

    Details always carry the statement truncated to its first 100
    characters; the generic and timeout cases also carry the elapsed time.
    """
    message = error_message(exc)
    sqlstate = getattr(exc, "sqlstate", None)
    text = message.lower()
    query = truncate_query(sql)
    code = classify_message(message, sqlstate)

    if code is ErrorCode.PERMISSION_DENIED:
        return PermissionDeniedError(
            "Permission denied for this operation", {"query": query}
        )
    if code is ErrorCode.TABLE_NOT_FOUND:
        return TableNotFoundError(message, {"query": query})
    if code is ErrorCode.TIMEOUT:
        return TimeoutError(
            f"Query timed out: {message}",
            {"query": query, "executionTime": elapsed_ms},
        )
    if _is_syntax_error(text, sqlstate):
        return QueryError(f"SQL syntax error: {message}", {"query": query})
    return QueryError(
        f"Query execution failed: {message}",
        {"query": query, "executionTime": elapsed_ms},
    )


def classify_connection_error(
    exc: BaseException, host: str, port: int, database: str
) -> PgMcpError:
    """Build the classified exception for a failed connection attempt."""
    message = error_message(exc).strip()
    sqlstate = getattr(exc, "sqlstate", None)
    text = message.lower()
    target = f"{host}:{port} database '{database}'"
    details: dict[str, Any] = {"host": host, "port": port, "database": database}

    if any(p in text for p in _AUTH_PHRASES) or sqlstate in _AUTH_STATES:
        return AuthenticationError(f"Authentication failed for {target}: {message}", details)
    if any(p in text for p in _CONNINFO_PHRASES):
        return ConfigError(f"Invalid connection parameters: {message}", details)
    if any(p in text for p in _CONNECT_TIMEOUT_PHRASES):
        return TimeoutError(f"Connection to {target} timed out: {message}", details)
    return NetworkError(f"Connection failed to {target}: {message}", details)
