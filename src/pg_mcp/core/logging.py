"""Logging configuration using structlog.

Logs go to stderr: stdout carries the MCP protocol stream when serving,
and query output when running CLI commands.
"""

import logging
import os
import re
import sys
from typing import Any

import structlog

_LOG_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

_SENSITIVE_KEY_PARTS = ("password", "secret", "token", "credential", "dsn")
_URL_PASSWORD = re.compile(r"(postgres(?:ql)?://[^:/@\s]+):[^@\s]+@")


class _LazyStderrFactory:
    """Resolve sys.stderr at logger creation time, not at configure() time.

    PrintLoggerFactory(file=sys.stderr) captures the file handle once.
    Under CliRunner tests the captured handle becomes stale when stderr
    is closed between invocations.  This factory defers the lookup so
    each logger gets the *current* sys.stderr.
    """

    def __call__(self, *args: Any, **kwargs: Any) -> structlog.PrintLogger:
        return structlog.PrintLogger(file=sys.stderr)


def redact_secrets(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Mask sensitive keys and passwords embedded in connection URLs."""
    for key, value in event_dict.items():
        if any(part in key.lower() for part in _SENSITIVE_KEY_PARTS):
            event_dict[key] = "****"
        elif isinstance(value, str) and "://" in value:
            event_dict[key] = _URL_PASSWORD.sub(r"\1:****@", value)
    return event_dict


def setup_logging(verbose: bool = False) -> None:
    """Configure structlog for pg-mcp.

    Args:
        verbose: If True, set log level to DEBUG. Otherwise INFO.
            ``DEBUG=true`` in the environment has the same effect.
    """
    if os.environ.get("DEBUG", "").lower() == "true":
        verbose = True
    log_level = "debug" if verbose else "info"

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            redact_secrets,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_LOG_LEVELS[log_level]),
        context_class=dict,
        logger_factory=_LazyStderrFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structlog logger, optionally bound with a name.

    IMPORTANT: Never call this at module level. Always call inside
    functions or __init__() after setup_logging() has been called.
    """
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger=name)
    return logger
