"""Query source resolution for the ``query`` command.

Resolves the SQL text from one of three sources:
1. Inline (-e flag)  - highest priority
2. File path         - middle priority
3. stdin             - lowest priority
"""

from __future__ import annotations

import sys
from pathlib import Path

from pg_mcp.core.exceptions import InputError


def resolve_query_source(
    inline: str | None,
    file_path: str | None,
) -> str:
    """Resolve SQL from inline, file, or stdin.

    Raises InputError when no source is available or the result is blank.
    """
    if inline is not None:
        sql = inline
    elif file_path is not None:
        p = Path(file_path)
        if not p.is_file():
            msg = (
                f"Query file not found: {file_path}\n"
                "Use -e for inline queries or pipe the query via stdin."
            )
            raise InputError(msg)
        sql = p.read_text()
    elif not sys.stdin.isatty():
        sql = sys.stdin.read()
    else:
        raise InputError("No query provided. Use -e, a file path, or pipe to stdin.")

    if not sql.strip():
        raise InputError("query is required and must be a string")
    return sql
