"""Schema introspection operations.

Framework-agnostic business logic for the list_tables and describe_table
tools. All statements go through PgClient.execute_query, so engine failures
arrive already classified.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from pg_mcp.core.exceptions import TableNotFoundError
from pg_mcp.core.models import ColumnInfo, IndexInfo, TableDescription, TableSummary

if TYPE_CHECKING:
    from pg_mcp.core.client import PgClient

SYSTEM_SCHEMAS = ("information_schema", "pg_catalog")

_LIST_TABLES_SQL = """
SELECT
    schemaname AS schema_name,
    tablename AS table_name,
    tableowner AS table_owner,
    hasindexes AS has_indexes,
    hastriggers AS has_triggers
FROM pg_catalog.pg_tables
WHERE schemaname NOT IN ('information_schema', 'pg_catalog')
"""

_COLUMNS_SQL = """
SELECT
    column_name,
    data_type,
    is_nullable,
    column_default,
    character_maximum_length,
    numeric_precision,
    numeric_scale
FROM information_schema.columns
WHERE table_schema = $1 AND table_name = $2
ORDER BY ordinal_position
"""

_INDEXES_SQL = """
SELECT
    indexname AS index_name,
    indexdef AS index_definition
FROM pg_catalog.pg_indexes
WHERE schemaname = $1 AND tablename = $2
"""

_PRIMARY_KEY_SQL = """
SELECT kcu.column_name
FROM information_schema.table_constraints tc
JOIN information_schema.key_column_usage kcu
    ON tc.constraint_name = kcu.constraint_name
    AND tc.table_schema = kcu.table_schema
    AND tc.table_name = kcu.table_name
WHERE tc.constraint_type = 'PRIMARY KEY'
    AND tc.table_schema = $1
    AND tc.table_name = $2
ORDER BY kcu.ordinal_position
"""


def list_tables(client: PgClient, schema: str | None = None) -> list[TableSummary]:
    """List user tables, optionally restricted to one schema.

    System schemas are always excluded. An unknown schema yields an empty
    list. Ordered by schema name, then table name.
    """
    sql = _LIST_TABLES_SQL
    params: list[str] = []
    if schema:
        sql += "  AND schemaname = $1\n"
        params.append(schema)
    sql += "ORDER BY schemaname, tablename"

    result = client.execute_query(sql, params)
    return [TableSummary.model_validate(row) for row in result.rows]


def is_primary_index(index_definition: str, primary_key: list[str]) -> bool:
    """Best-effort match of an index definition against the primary key.

    True when the key columns, joined with ", " in key order, appear
    verbatim in the definition. Composite keys indexed in a different
    column order, or quoted identifiers, are not recognised.
    """
    return bool(primary_key) and ", ".join(primary_key) in index_definition


def is_unique_index(index_definition: str) -> bool:
    return "unique" in index_definition.lower()


def describe_table(
    client: PgClient, table: str, schema: str = "public"
) -> TableDescription:
    """Columns, indexes and primary key of ``schema.table``.

    A table that reports no columns is treated as missing and raises
    TableNotFoundError.
    """
    log = structlog.get_logger()

    column_result = client.execute_query(_COLUMNS_SQL, [schema, table])
    if not column_result.rows:
        raise TableNotFoundError(f'Table "{schema}"."{table}" not found')

    index_result = client.execute_query(_INDEXES_SQL, [schema, table])
    pk_result = client.execute_query(_PRIMARY_KEY_SQL, [schema, table])
    primary_key = [row["column_name"] for row in pk_result.rows]
    pk_columns = set(primary_key)

    columns = [
        ColumnInfo(
            column_name=col["column_name"],
            data_type=col["data_type"],
            is_nullable=col["is_nullable"] == "YES",
            column_default=col["column_default"],
            character_maximum_length=col["character_maximum_length"],
            numeric_precision=col["numeric_precision"],
            numeric_scale=col["numeric_scale"],
            is_primary_key=col["column_name"] in pk_columns,
        )
        for col in column_result.rows
    ]
    indexes = [
        IndexInfo(
            index_name=idx["index_name"],
            index_definition=idx["index_definition"],
            is_primary=is_primary_index(idx["index_definition"], primary_key),
            is_unique=is_unique_index(idx["index_definition"]),
        )
        for idx in index_result.rows
    ]

    log.debug(
        "described table",
        schema=schema,
        table=table,
        columns=len(columns),
        indexes=len(indexes),
    )
    return TableDescription(schema=schema, table=table, columns=columns, indexes=indexes)
