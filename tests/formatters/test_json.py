"""Tests for JSON rendering of results."""

import json
import uuid
from datetime import UTC, date, datetime
from decimal import Decimal

import pytest

from pg_mcp.core.models import FieldMeta, QueryResult
from pg_mcp.formatters.json import JSONFormatter, to_jsonable


def _make_result(rows=None):
    if rows is None:
        rows = [{"id": 1, "name": "alice"}, {"id": 2, "name": "bob"}]
    return QueryResult(
        rows=rows,
        row_count=len(rows),
        command="SELECT",
        fields=[
            FieldMeta(name="id", type_oid=23, type_name="int4"),
            FieldMeta(name="name", type_oid=25, type_name="text"),
        ],
        execution_time=3,
    )


class _Opaque:
    def __str__(self):
        return "opaque-value"


@pytest.mark.unit
class TestToJsonable:
    def test_result_uses_camel_case(self):
        data = to_jsonable(_make_result())
        assert data["rowCount"] == 2
        assert data["executionTime"] == 3
        assert data["fields"][0]["dataTypeID"] == 23
        assert data["fields"][1]["dataTypeName"] == "text"

    def test_engine_values(self):
        value = {
            "price": Decimal("12.50"),
            "day": date(2024, 1, 2),
            "at": datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC),
            "key": uuid.UUID("12345678-1234-5678-1234-567812345678"),
            "raw": b"\x00\x01",
        }
        data = to_jsonable(value)
        assert data["price"] == "12.50"
        assert data["day"] == "2024-01-02"
        assert data["at"].startswith("2024-01-02T03:04:05")
        assert data["key"] == "12345678-1234-5678-1234-567812345678"
        assert data["raw"] == "AAE="

    def test_unknown_object_falls_back_to_str(self):
        assert to_jsonable({"x": _Opaque()}) == {"x": "opaque-value"}


@pytest.mark.unit
class TestJSONFormatter:
    def test_outputs_valid_json(self):
        output = JSONFormatter().render(_make_result())
        parsed = json.loads(output)
        assert parsed["rows"] == [{"id": 1, "name": "alice"}, {"id": 2, "name": "bob"}]
        assert parsed["command"] == "SELECT"

    def test_pretty_print_default(self):
        output = JSONFormatter().render(_make_result())
        assert "\n" in output
        assert "  " in output

    def test_compact(self):
        output = JSONFormatter(compact=True).render(_make_result())
        assert "\n" not in output

    def test_non_ascii_kept(self):
        output = JSONFormatter().render({"name": "Zoë"})
        assert "Zoë" in output

    def test_format_yields_chunks(self):
        chunks = list(JSONFormatter().format({"a": 1}))
        assert len(chunks) == 1
