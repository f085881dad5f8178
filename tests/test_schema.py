"""Tests for schema introspection (list_tables, describe_table)."""

from unittest.mock import MagicMock

import pytest

from pg_mcp.core.exceptions import ErrorCode, TableNotFoundError
from pg_mcp.core.models import QueryResult, TableDescription
from pg_mcp.core.schema import (
    describe_table,
    is_primary_index,
    is_unique_index,
    list_tables,
)


def _make_result(rows, command="SELECT"):
    return QueryResult(
        rows=rows,
        row_count=len(rows),
        command=command,
        fields=[],
        execution_time=1,
    )


def _column(name, data_type="integer", nullable="NO", default=None, length=None):
    return {
        "column_name": name,
        "data_type": data_type,
        "is_nullable": nullable,
        "column_default": default,
        "character_maximum_length": length,
        "numeric_precision": 32 if data_type == "integer" else None,
        "numeric_scale": 0 if data_type == "integer" else None,
    }


_USERS_COLUMNS = [
    _column("id", default="nextval('test_users_id_seq'::regclass)"),
    _column("name", "character varying", length=100),
    _column("email", "character varying", nullable="YES", length=255),
    _column("age", nullable="YES"),
    _column("created_at", "timestamp without time zone", nullable="YES", default="now()"),
]

_USERS_INDEXES = [
    {
        "index_name": "test_users_pkey",
        "index_definition": "CREATE UNIQUE INDEX test_users_pkey ON public.test_users USING btree (id)",
    },
    {
        "index_name": "test_users_email_key",
        "index_definition": "CREATE INDEX test_users_email_key ON public.test_users USING btree (email)",
    },
]


@pytest.fixture
def users_client():
    client = MagicMock()
    client.execute_query.side_effect = [
        _make_result(_USERS_COLUMNS),
        _make_result(_USERS_INDEXES),
        _make_result([{"column_name": "id"}]),
    ]
    return client


@pytest.mark.unit
class TestListTables:
    def test_all_schemas(self):
        client = MagicMock()
        client.execute_query.return_value = _make_result(
            [
                {
                    "schema_name": "public",
                    "table_name": "test_users",
                    "table_owner": "postgres",
                    "has_indexes": True,
                    "has_triggers": False,
                }
            ]
        )
        tables = list_tables(client)
        assert [t.table_name for t in tables] == ["test_users"]

        sql, params = client.execute_query.call_args.args
        assert params == []
        assert "'information_schema', 'pg_catalog'" in sql
        assert sql.rstrip().endswith("ORDER BY schemaname, tablename")
        assert "$1" not in sql

    def test_schema_filter_is_parameterized(self):
        client = MagicMock()
        client.execute_query.return_value = _make_result([])
        list_tables(client, "app")

        sql, params = client.execute_query.call_args.args
        assert "schemaname = $1" in sql
        assert params == ["app"]
        assert "'app'" not in sql

    def test_unknown_schema_returns_empty(self):
        client = MagicMock()
        client.execute_query.return_value = _make_result([])
        assert list_tables(client, "nonexistent_schema") == []

    def test_empty_schema_means_all(self):
        client = MagicMock()
        client.execute_query.return_value = _make_result([])
        list_tables(client, "")
        assert client.execute_query.call_args.args[1] == []


@pytest.mark.unit
class TestDescribeTable:
    def test_columns_in_order(self, users_client):
        desc = describe_table(users_client, "test_users")
        assert isinstance(desc, TableDescription)
        assert desc.schema_ == "public"
        assert desc.table == "test_users"
        assert [c.column_name for c in desc.columns] == [
            "id",
            "name",
            "email",
            "age",
            "created_at",
        ]

    def test_primary_key_flag(self, users_client):
        desc = describe_table(users_client, "test_users")
        flags = {c.column_name: c.is_primary_key for c in desc.columns}
        assert flags == {
            "id": True,
            "name": False,
            "email": False,
            "age": False,
            "created_at": False,
        }

    def test_nullable_is_bool(self, users_client):
        desc = describe_table(users_client, "test_users")
        assert desc.columns[0].is_nullable is False
        assert desc.columns[2].is_nullable is True

    def test_index_flags(self, users_client):
        desc = describe_table(users_client, "test_users")
        pkey, email_key = desc.indexes
        assert pkey.is_primary is True
        assert pkey.is_unique is True
        assert email_key.is_primary is False
        assert email_key.is_unique is False

    def test_queries_bind_schema_and_table(self, users_client):
        describe_table(users_client, "test_users", "public")
        for call in users_client.execute_query.call_args_list:
            assert call.args[1] == ["public", "test_users"]

    def test_not_found(self):
        client = MagicMock()
        client.execute_query.return_value = _make_result([])
        with pytest.raises(TableNotFoundError) as exc_info:
            describe_table(client, "missing", "public")
        assert exc_info.value.code == ErrorCode.TABLE_NOT_FOUND
        assert exc_info.value.message == 'Table "public"."missing" not found'
        assert client.execute_query.call_count == 1

    def test_serialized_schema_key(self, users_client):
        desc = describe_table(users_client, "test_users")
        assert desc.model_dump(by_alias=True)["schema"] == "public"


@pytest.mark.unit
class TestIndexHelpers:
    def test_primary_composite_in_order(self):
        defn = "CREATE UNIQUE INDEX pk ON public.t USING btree (a, b)"
        assert is_primary_index(defn, ["a", "b"]) is True

    def test_primary_composite_other_order_not_recognised(self):
        defn = "CREATE UNIQUE INDEX pk ON public.t USING btree (b, a)"
        assert is_primary_index(defn, ["a", "b"]) is False

    def test_no_primary_key(self):
        assert is_primary_index("CREATE INDEX i ON t (a)", []) is False

    def test_unique_case_insensitive(self):
        assert is_unique_index("create unique index i on t (a)") is True
        assert is_unique_index("CREATE INDEX i ON t (a)") is False
