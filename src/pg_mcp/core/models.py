"""Result models for pg-mcp.

Pydantic models for query results, table listings and table descriptions
returned by the executor and schema inspector. QueryResult serializes with
the camelCase names MCP clients see (``rowCount``, ``executionTime``, ...);
the catalog models keep PostgreSQL's snake_case column names.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Positional parameter values accepted by execute_query.
Primitive = str | int | float | bool | None


class QueryRequest(BaseModel):
    """A statement plus its positional ``$n`` parameter values."""

    sql: str = Field(min_length=1)
    params: list[Primitive] = []


class FieldMeta(BaseModel):
    """Metadata for a single result column."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    type_oid: int = Field(serialization_alias="dataTypeID")
    type_name: str = Field(serialization_alias="dataTypeName")


class QueryResult(BaseModel):
    """Result of a SQL statement execution."""

    model_config = ConfigDict(arbitrary_types_allowed=True, populate_by_name=True)

    rows: list[dict[str, Any]]
    row_count: int = Field(ge=0, serialization_alias="rowCount")
    command: str
    fields: list[FieldMeta]
    execution_time: int = Field(ge=0, serialization_alias="executionTime")


class TableSummary(BaseModel):
    schema_name: str
    table_name: str
    table_owner: str
    has_indexes: bool
    has_triggers: bool


class ColumnInfo(BaseModel):
    column_name: str
    data_type: str
    is_nullable: bool
    column_default: str | None = None
    character_maximum_length: int | None = None
    numeric_precision: int | None = None
    numeric_scale: int | None = None
    is_primary_key: bool = False


class IndexInfo(BaseModel):
    index_name: str
    index_definition: str
    is_primary: bool
    is_unique: bool


class TableDescription(BaseModel):
    schema_: str = Field(alias="schema")
    table: str
    columns: list[ColumnInfo]
    indexes: list[IndexInfo]

    model_config = ConfigDict(populate_by_name=True)


class ConnectionCheck(BaseModel):
    """Outcome of a successful connection test."""

    version: str
    latency_ms: int
    database: str
    user: str
