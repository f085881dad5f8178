"""Statement execution and result shaping.

Runs one SQL statement on an already-open psycopg connection and turns the
cursor state into a QueryResult. Opening and closing the connection is the
caller's job (see PgClient).
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from typing import Any

import psycopg
import sentry_sdk
import structlog
from psycopg.rows import dict_row

from pg_mcp.core.classify import classify_query_error
from pg_mcp.core.models import FieldMeta, Primitive, QueryResult
from pg_mcp.core.type_catalog import resolve_type_name


def command_from_status(status: str | None) -> str:
    """Extract the statement verb from a command tag such as ``INSERT 0 1``."""
    if not status:
        return "UNKNOWN"
    return status.split(None, 1)[0].upper()


def _elapsed_ms(start_time: float) -> int:
    return max(0, int((time.monotonic() - start_time) * 1000))


def execute(
    conn: psycopg.Connection[Any],
    sql: str,
    params: Sequence[Primitive] | None = None,
) -> QueryResult:
    """Execute ``sql`` with positional ``params`` and return a QueryResult.

    Every statement goes through the extended protocol as a prepared
    statement, with or without parameters, so the text is parsed as exactly
    one command and never interpolated. Engine failures are raised as
    classified PgMcpError subclasses.
    """
    log = structlog.get_logger()
    bound = list(params) if params else []
    sql_normalized = " ".join(sql.split())

    log.debug("executing query", sql=sql_normalized[:100], param_count=len(bound))
    with sentry_sdk.start_span(op="db.query", description=sql_normalized[:100]) as span:
        start_time = time.monotonic()
        try:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(sql, bound, prepare=True)

                fields: list[FieldMeta] = []
                rows: list[dict[str, Any]] = []
                if cur.description:
                    fields = [
                        FieldMeta(
                            name=desc.name,
                            type_oid=desc.type_code,
                            type_name=resolve_type_name(desc.type_code),
                        )
                        for desc in cur.description
                    ]
                    rows = cur.fetchall()

                execution_time = _elapsed_ms(start_time)
                row_count = cur.rowcount if cur.rowcount and cur.rowcount > 0 else 0
                command = command_from_status(cur.statusmessage)
        except psycopg.Error as e:
            execution_time = _elapsed_ms(start_time)
            error = classify_query_error(e, sql, execution_time)
            span.set_status("internal_error")
            log.error(
                "query failed",
                code=str(error.code),
                error=error.message,
                duration_ms=execution_time,
            )
            raise error from e

        span.set_data("row_count", row_count)
        span.set_data("duration_ms", execution_time)
        log.debug(
            "query complete",
            command=command,
            row_count=row_count,
            duration_ms=execution_time,
        )

    return QueryResult(
        rows=rows,
        row_count=row_count,
        command=command,
        fields=fields,
        execution_time=execution_time,
    )
