"""Exception hierarchy for pg-mcp.

Every exception carries one of the nine error codes reported to MCP clients,
a human-readable message, optional diagnostic details, and an exit_code for
CLI return value mapping.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pg_mcp.core.exit_codes import ExitCode


class ErrorCode(StrEnum):
    """Error kinds reported in the ``code`` field of an error reply."""

    INVALID_CONNECTION_STRING = "INVALID_CONNECTION_STRING"
    CONNECTION_FAILED = "CONNECTION_FAILED"
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    QUERY_ERROR = "QUERY_ERROR"
    TIMEOUT = "TIMEOUT"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    TABLE_NOT_FOUND = "TABLE_NOT_FOUND"
    INVALID_PARAMS = "INVALID_PARAMS"
    NO_CONNECTION = "NO_CONNECTION"


class PgMcpError(Exception):
    """Base exception for all pg-mcp errors."""

    code: ErrorCode = ErrorCode.QUERY_ERROR
    exit_code: int = ExitCode.GENERAL_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)

    def to_response(self) -> dict[str, Any]:
        error: dict[str, Any] = {"code": str(self.code), "message": self.message}
        if self.details:
            error["details"] = self.details
        return {"error": error}


class QueryError(PgMcpError):
    """Statement rejected or failed inside the engine."""

    code = ErrorCode.QUERY_ERROR
    exit_code: int = ExitCode.QUERY_ERROR


class PermissionDeniedError(QueryError):
    """Current role lacks a privilege the statement needs."""

    code = ErrorCode.PERMISSION_DENIED


class TableNotFoundError(QueryError):
    """Referenced table, column or other object does not exist."""

    code = ErrorCode.TABLE_NOT_FOUND
    exit_code: int = ExitCode.NOT_FOUND


class NetworkError(PgMcpError):
    """Connection failures, unreachable host."""

    code = ErrorCode.CONNECTION_FAILED
    exit_code: int = ExitCode.NETWORK_ERROR


class AuthenticationError(NetworkError):
    """Server rejected the supplied credentials."""

    code = ErrorCode.AUTHENTICATION_FAILED
    exit_code: int = ExitCode.AUTH_ERROR


class TimeoutError(NetworkError):
    """Statement timeout, connection timeout."""

    code = ErrorCode.TIMEOUT
    exit_code: int = ExitCode.TIMEOUT


class ConfigError(PgMcpError):
    """Malformed config, missing profile, unparseable connection string."""

    code = ErrorCode.INVALID_CONNECTION_STRING
    exit_code: int = ExitCode.CONFIG_ERROR


class InputError(PgMcpError):
    """Invalid tool arguments, query file not found."""

    code = ErrorCode.INVALID_PARAMS
    exit_code: int = ExitCode.INPUT_ERROR


class NoConnectionError(PgMcpError):
    """No usable connection settings have been configured."""

    code = ErrorCode.NO_CONNECTION
    exit_code: int = ExitCode.CONFIG_ERROR
