"""Standard exit codes for pg-mcp CLI commands.

Exit codes follow Unix conventions; each error kind maps onto one of them.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for pg-mcp commands."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    USAGE_ERROR = 2
    INPUT_ERROR = 3
    QUERY_ERROR = 4
    NETWORK_ERROR = 5
    TIMEOUT = 6
    CONFIG_ERROR = 7
    AUTH_ERROR = 8
    NOT_FOUND = 9
