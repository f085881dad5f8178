"""JSON rendering for query results and catalog models."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from pydantic_core import to_jsonable_python

if TYPE_CHECKING:
    from collections.abc import Iterator


def to_jsonable(value: Any) -> Any:
    """Convert models and engine values into JSON-compatible data.

    Models serialize by alias (``rowCount``, ``dataTypeID``). Decimals,
    dates and UUIDs become strings, bytea becomes base64, and anything
    pydantic cannot serialize falls back to ``str()``.
    """
    return to_jsonable_python(value, by_alias=True, bytes_mode="base64", fallback=str)


class JSONFormatter:
    def __init__(self, compact: bool = False) -> None:
        self.compact = compact

    def format(self, payload: Any) -> Iterator[str]:
        data = to_jsonable(payload)
        if self.compact:
            yield json.dumps(data, ensure_ascii=False)
        else:
            yield json.dumps(data, indent=2, ensure_ascii=False)

    def render(self, payload: Any) -> str:
        return "\n".join(self.format(payload))
