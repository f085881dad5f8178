"""Shared test fixtures for pg-mcp."""

import os
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest
from typer.testing import CliRunner

from pg_mcp.cli.main import app

# Env vars that feed configuration resolution; cleared for every test so a
# developer's shell settings never leak into unit tests.
_CONFIG_ENV_VARS = (
    "PGHOST",
    "PGPORT",
    "PGDATABASE",
    "PGUSER",
    "PGPASSWORD",
    "PGSSLMODE",
    "POSTGRES_HOST",
    "POSTGRES_PORT",
    "POSTGRES_DATABASE",
    "POSTGRES_USER",
    "POSTGRES_PASSWORD",
    "POSTGRES_SSL",
    "POSTGRES_URL",
    "PG_MCP_PROFILE",
    "SENTRY_DSN",
    "DEBUG",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def runner():
    """Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_runner(runner, temp_dir):
    """Invoke the CLI app with the given arguments and an empty config file."""
    config_path = temp_dir / "config.toml"

    def invoke(*args: str, **kwargs):
        return runner.invoke(app, ["--config", str(config_path), *args], **kwargs)

    return invoke


@pytest.fixture
def temp_dir():
    """Temporary directory for test files."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def pg_dsn():
    """DSN of a PostgreSQL server for integration tests; skips when unset."""
    dsn = os.environ.get("PG_MCP_TEST_DSN")
    if not dsn:
        pytest.skip("PG_MCP_TEST_DSN not set")
    return dsn
