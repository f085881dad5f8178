"""pg-mcp: PostgreSQL tools for Model Context Protocol clients."""

from pg_mcp.__about__ import __version__

__all__ = ["__version__"]
