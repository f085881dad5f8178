"""Sentry integration for error tracking and performance monitoring.

Sentry is initialized after logging setup, and only when SENTRY_DSN is set.
Spans and transactions are no-ops otherwise.
"""

from __future__ import annotations

import os

import sentry_sdk

from pg_mcp.__about__ import __version__


def setup_sentry(environment: str | None = None) -> bool:
    """Initialize Sentry from SENTRY_DSN. Returns True if it was enabled."""
    dsn = os.environ.get("SENTRY_DSN")
    if not dsn:
        return False
    sentry_sdk.init(
        dsn=dsn,
        traces_sample_rate=float(os.environ.get("SENTRY_TRACES_SAMPLE_RATE", "0.03")),
        environment=environment or os.environ.get("SENTRY_ENVIRONMENT", "local"),
        release=__version__,
        attach_stacktrace=True,
        send_default_pii=False,
    )
    return True
