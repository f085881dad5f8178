"""PostgreSQL client for pg-mcp.

Wraps one psycopg v3 synchronous connection per use: opened on entry,
closed on every exit path. Connections use RawCursor so statements take
PostgreSQL's native ``$1`` placeholders, and run in autocommit mode so a
single call may carry its own BEGIN ... COMMIT. Numbers and booleans are
bound as untyped text, like strings, so the server infers their type from
the statement.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

import psycopg
import sentry_sdk
import structlog
from psycopg.adapt import Dumper

from pg_mcp.core.classify import classify_connection_error
from pg_mcp.core.exceptions import PgMcpError
from pg_mcp.core.executor import execute
from pg_mcp.core.models import ConnectionCheck

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pg_mcp.core.config import ConnectionDescriptor
    from pg_mcp.core.models import Primitive, QueryResult


class UntypedTextDumper(Dumper):
    """Send a Python scalar as text with the unknown OID (0)."""

    def dump(self, obj: Any) -> bytes:
        if isinstance(obj, bool):
            return b"true" if obj else b"false"
        return str(obj).encode()


def register_untyped_dumpers(conn: psycopg.Connection[Any]) -> None:
    for cls in (bool, int, float):
        conn.adapters.register_dumper(cls, UntypedTextDumper)


class PgClient:
    """Synchronous PostgreSQL client using psycopg v3."""

    def __init__(self, descriptor: ConnectionDescriptor) -> None:
        self.descriptor = descriptor
        self._connection: psycopg.Connection[Any] | None = None

    def __enter__(self) -> PgClient:
        self.connect()
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def connect(self) -> psycopg.Connection[Any]:
        if self._connection is not None and not self._connection.closed:
            return self._connection

        d = self.descriptor
        log = structlog.get_logger()
        log.debug("connecting", host=d.host, port=d.port, database=d.database, user=d.user)
        with sentry_sdk.start_span(op="db.connect", description=f"{d.host}:{d.port}"):
            try:
                self._connection = psycopg.connect(
                    host=d.host,
                    port=d.port,
                    dbname=d.database,
                    user=d.user,
                    password=d.password,
                    sslmode=d.sslmode,
                    connect_timeout=d.connect_timeout,
                    application_name=d.application_name,
                    autocommit=True,
                    cursor_factory=psycopg.RawCursor,
                )
            except psycopg.Error as e:
                error = classify_connection_error(e, d.host, d.port, d.database)
                log.error("connection failed", code=str(error.code), error=error.message)
                raise error from e

        register_untyped_dumpers(self._connection)
        timeout_ms = int(d.statement_timeout * 1000)
        try:
            execute(self._connection, f"SET statement_timeout = {timeout_ms}")
        except PgMcpError:
            self.close()
            raise
        return self._connection

    @property
    def connection(self) -> psycopg.Connection[Any]:
        return self.connect()

    def execute_query(
        self, sql: str, params: Sequence[Primitive] | None = None
    ) -> QueryResult:
        """Execute SQL with positional parameters and return a QueryResult."""
        return execute(self.connection, sql, params)

    def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None


def check_connection(descriptor: ConnectionDescriptor) -> ConnectionCheck:
    """Open a connection, ask for the server version, and close it again.

    Latency covers connection establishment plus the version query.
    """
    start_time = time.monotonic()
    with PgClient(descriptor) as client:
        result = client.execute_query(
            "SELECT version() AS version, current_database() AS database, current_user AS username"
        )
    latency_ms = int((time.monotonic() - start_time) * 1000)
    row = result.rows[0]
    return ConnectionCheck(
        version=row["version"],
        latency_ms=latency_ms,
        database=row["database"],
        user=row["username"],
    )
