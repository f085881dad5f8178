"""Tests for engine error classification."""

from types import SimpleNamespace

import pytest

from pg_mcp.core.classify import (
    QUERY_PREFIX_LENGTH,
    classify_connection_error,
    classify_message,
    classify_query_error,
    error_message,
    truncate_query,
)
from pg_mcp.core.exceptions import (
    AuthenticationError,
    ConfigError,
    ErrorCode,
    NetworkError,
    PermissionDeniedError,
    QueryError,
    TableNotFoundError,
    TimeoutError,
)


class FakeDbError(Exception):
    """Stand-in for psycopg.Error carrying sqlstate and diag."""

    def __init__(self, message, sqlstate=None, primary=None):
        super().__init__(message)
        self.sqlstate = sqlstate
        self.diag = SimpleNamespace(message_primary=primary)


@pytest.mark.unit
class TestErrorMessage:
    def test_prefers_primary_message(self):
        exc = FakeDbError("ERROR: full text\nLINE 1", primary="full text")
        assert error_message(exc) == "full text"

    def test_falls_back_to_str(self):
        assert error_message(ValueError("plain")) == "plain"

    def test_empty_primary_falls_back(self):
        exc = FakeDbError("from str", primary="")
        assert error_message(exc) == "from str"


@pytest.mark.unit
class TestTruncateQuery:
    def test_short_query_unchanged(self):
        assert truncate_query("SELECT 1") == "SELECT 1"

    def test_long_query_truncated(self):
        sql = "SELECT " + "x, " * 100
        assert truncate_query(sql) == sql[:QUERY_PREFIX_LENGTH]
        assert len(truncate_query(sql)) == 100


@pytest.mark.unit
class TestClassifyMessage:
    def test_permission(self):
        assert classify_message("permission denied for table users") == ErrorCode.PERMISSION_DENIED

    def test_permission_by_sqlstate(self):
        assert classify_message("nope", "42501") == ErrorCode.PERMISSION_DENIED

    def test_does_not_exist(self):
        msg = 'relation "does_not_exist_12345" does not exist'
        assert classify_message(msg) == ErrorCode.TABLE_NOT_FOUND

    def test_column_does_not_exist(self):
        assert classify_message('column "foo" does not exist') == ErrorCode.TABLE_NOT_FOUND

    def test_syntax_is_query_error(self):
        assert classify_message('syntax error at or near "SELCT"') == ErrorCode.QUERY_ERROR

    def test_statement_timeout(self):
        msg = "canceling statement due to statement timeout"
        assert classify_message(msg) == ErrorCode.TIMEOUT

    def test_timeout_by_sqlstate(self):
        assert classify_message("query canceled", "57014") == ErrorCode.TIMEOUT

    def test_fallback(self):
        assert classify_message("division by zero", "22012") == ErrorCode.QUERY_ERROR

    def test_case_insensitive(self):
        assert classify_message("PERMISSION DENIED for schema x") == ErrorCode.PERMISSION_DENIED

    def test_permission_wins_over_missing(self):
        msg = "permission denied: relation does not exist"
        assert classify_message(msg) == ErrorCode.PERMISSION_DENIED

    def test_missing_wins_over_syntax(self):
        msg = "syntax error: function foo does not exist"
        assert classify_message(msg) == ErrorCode.TABLE_NOT_FOUND


@pytest.mark.unit
class TestClassifyQueryError:
    def test_permission_denied(self):
        exc = FakeDbError("permission denied for table secrets", "42501")
        err = classify_query_error(exc, "SELECT * FROM secrets", 5)
        assert isinstance(err, PermissionDeniedError)
        assert err.message == "Permission denied for this operation"
        assert err.details == {"query": "SELECT * FROM secrets"}

    def test_table_not_found_keeps_engine_message(self):
        msg = 'relation "does_not_exist_12345" does not exist'
        exc = FakeDbError(msg, "42P01", primary=msg)
        err = classify_query_error(exc, "SELECT * FROM does_not_exist_12345", 3)
        assert isinstance(err, TableNotFoundError)
        assert err.code == ErrorCode.TABLE_NOT_FOUND
        assert err.message == msg
        assert err.details == {"query": "SELECT * FROM does_not_exist_12345"}

    def test_syntax_error(self):
        msg = 'syntax error at or near "SELCT"'
        err = classify_query_error(FakeDbError(msg, "42601", primary=msg), "SELCT 1", 1)
        assert type(err) is QueryError
        assert err.code == ErrorCode.QUERY_ERROR
        assert err.message == f"SQL syntax error: {msg}"
        assert err.details == {"query": "SELCT 1"}

    def test_timeout(self):
        msg = "canceling statement due to statement timeout"
        err = classify_query_error(FakeDbError(msg, "57014"), "SELECT pg_sleep(10)", 1000)
        assert isinstance(err, TimeoutError)
        assert err.message == f"Query timed out: {msg}"
        assert err.details == {"query": "SELECT pg_sleep(10)", "executionTime": 1000}

    def test_generic_failure(self):
        err = classify_query_error(FakeDbError("division by zero", "22012"), "SELECT 1/0", 7)
        assert type(err) is QueryError
        assert err.message == "Query execution failed: division by zero"
        assert err.details == {"query": "SELECT 1/0", "executionTime": 7}

    def test_query_truncated_in_details(self):
        sql = "SELECT * FROM t WHERE " + "a = 1 AND " * 30
        err = classify_query_error(FakeDbError("permission denied"), sql, 0)
        assert err.details["query"] == sql[:100]


@pytest.mark.unit
class TestClassifyConnectionError:
    def test_authentication(self):
        exc = FakeDbError('password authentication failed for user "bob"')
        err = classify_connection_error(exc, "db.example.com", 5432, "app")
        assert isinstance(err, AuthenticationError)
        assert "db.example.com:5432" in err.message
        assert err.details == {"host": "db.example.com", "port": 5432, "database": "app"}

    def test_authentication_by_sqlstate(self):
        err = classify_connection_error(FakeDbError("rejected", "28P01"), "h", 5432, "d")
        assert err.code == ErrorCode.AUTHENTICATION_FAILED

    def test_timeout(self):
        err = classify_connection_error(FakeDbError("timeout expired"), "h", 5432, "d")
        assert isinstance(err, TimeoutError)
        assert "timed out" in err.message

    def test_invalid_dsn(self):
        exc = FakeDbError('invalid connection option "foo"')
        err = classify_connection_error(exc, "h", 5432, "d")
        assert isinstance(err, ConfigError)
        assert err.code == ErrorCode.INVALID_CONNECTION_STRING

    def test_refused(self):
        exc = FakeDbError("connection refused\n\tIs the server running?")
        err = classify_connection_error(exc, "localhost", 5433, "postgres")
        assert type(err) is NetworkError
        assert err.code == ErrorCode.CONNECTION_FAILED
        assert err.message.startswith("Connection failed to localhost:5433 database 'postgres'")

    def test_message_never_contains_password(self):
        err = classify_connection_error(FakeDbError("connection refused"), "h", 5432, "d")
        assert "password" not in err.message.lower()
