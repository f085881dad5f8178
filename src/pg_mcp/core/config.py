"""Configuration management for pg-mcp.

Handles TOML config files, environment variables, named profiles,
connection strings and configuration precedence resolution.

Precedence order (highest to lowest):
1. CLI flags (--host, --port, etc.)
2. --dsn flag or POSTGRES_URL (parsed into components)
3. Environment variables (PG* then POSTGRES_*)
4. Named profile (--profile or PG_MCP_PROFILE env var)
5. Config file defaults
6. Built-in defaults

Passwords set through the configure_connection tool live only in memory.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs, unquote, urlparse

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from pg_mcp.core.exceptions import ConfigError

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "pg-mcp" / "config.toml"

_VALID_SSLMODES = frozenset(
    {"disable", "allow", "prefer", "require", "verify-ca", "verify-full"}
)
_TLS_SSLMODES = frozenset({"require", "verify-ca", "verify-full"})

# Later entries win, so POSTGRES_* overrides the libpq PG* variables.
_ENV_VARS: dict[str, str] = {
    "PGHOST": "host",
    "PGPORT": "port",
    "PGDATABASE": "database",
    "PGUSER": "user",
    "PGPASSWORD": "password",  # pragma: allowlist secret
    "PGSSLMODE": "sslmode",
    "POSTGRES_HOST": "host",
    "POSTGRES_PORT": "port",
    "POSTGRES_DATABASE": "database",
    "POSTGRES_USER": "user",
    "POSTGRES_PASSWORD": "password",  # pragma: allowlist secret
}

_DEFAULTS: dict[str, Any] = {
    "host": "localhost",
    "port": 5432,
    "database": "postgres",
    "user": "postgres",
    "password": None,
    "sslmode": "prefer",
    "connect_timeout": 30,
    "statement_timeout": 60.0,
    "application_name": "pg-mcp",
}


def parse_dsn(dsn: str) -> dict[str, Any]:
    """Supports postgresql:// and postgres:// schemes with query params."""
    parsed = urlparse(dsn)
    if parsed.scheme not in ("postgresql", "postgres"):
        msg = f"Invalid DSN scheme: '{parsed.scheme}'. Expected 'postgresql' or 'postgres'"
        raise ConfigError(msg)

    result: dict[str, Any] = {}
    try:
        port = parsed.port
    except ValueError as e:
        raise ConfigError(f"Invalid DSN port: {e}") from e
    if parsed.hostname:
        result["host"] = parsed.hostname
    if port:
        result["port"] = port
    if parsed.path and parsed.path.strip("/"):
        result["database"] = unquote(parsed.path.strip("/"))
    if parsed.username:
        result["user"] = unquote(parsed.username)
    if parsed.password:
        result["password"] = unquote(parsed.password)
    query_params = parse_qs(parsed.query)
    if "sslmode" in query_params:
        result["sslmode"] = query_params["sslmode"][0]
    if "connect_timeout" in query_params:
        try:
            result["connect_timeout"] = int(query_params["connect_timeout"][0])
        except ValueError as e:
            raise ConfigError(f"Invalid DSN connect_timeout: {e}") from e
    if "application_name" in query_params:
        result["application_name"] = query_params["application_name"][0]
    return result


def _validate_sslmode(v: str) -> str:
    if v not in _VALID_SSLMODES:
        msg = f"Invalid sslmode: '{v}'. Must be one of: {', '.join(sorted(_VALID_SSLMODES))}"
        raise ValueError(msg)
    return v


def _validate_port(v: int) -> int:
    if not (1 <= v <= 65535):
        msg = f"Invalid port: {v}. Must be 1-65535"
        raise ValueError(msg)
    return v


class Profile(BaseModel):
    """Named connection profile from the config file."""

    dsn: str | None = None
    host: str = "localhost"
    port: int = 5432
    database: str = "postgres"
    user: str = "postgres"
    password: str | None = None
    sslmode: str = "prefer"
    connect_timeout: int = 30
    statement_timeout: float = 60.0
    application_name: str = "pg-mcp"

    @model_validator(mode="before")
    @classmethod
    def parse_dsn_into_components(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("dsn"):
            dsn_fields = parse_dsn(data["dsn"])
            for key, value in dsn_fields.items():
                if key not in data:
                    data[key] = value
        return data

    @field_validator("sslmode")
    @classmethod
    def validate_sslmode(cls, v: str) -> str:
        return _validate_sslmode(v)

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        return _validate_port(v)


class AppConfig(BaseModel):
    connect_timeout: int = 30
    statement_timeout: float = 60.0
    default_profile: str | None = None
    profiles: dict[str, Profile] = {}


class ConnectionDescriptor(BaseModel):
    """Everything needed to open one connection. Never mutated in place."""

    model_config = ConfigDict(frozen=True)

    host: str = "localhost"
    port: int = 5432
    database: str = "postgres"
    user: str = "postgres"
    password: str | None = Field(default=None, repr=False)
    sslmode: str = "prefer"
    connect_timeout: int = 30
    statement_timeout: float = 60.0
    application_name: str = "pg-mcp"
    active_profile: str | None = None
    sources: dict[str, str] = {}

    @field_validator("sslmode")
    @classmethod
    def validate_sslmode(cls, v: str) -> str:
        return _validate_sslmode(v)

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        return _validate_port(v)

    @property
    def ssl(self) -> bool:
        return self.sslmode in _TLS_SSLMODES

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.database and self.user and self.password)


def build_descriptor(**fields: Any) -> ConnectionDescriptor:
    """Validate ``fields`` into a descriptor, raising ConfigError on bad input."""
    try:
        return ConnectionDescriptor(**fields)
    except ValidationError as e:
        errors = "; ".join(err["msg"] for err in e.errors())
        raise ConfigError(f"Invalid connection settings: {errors}") from e


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from TOML file.

    Returns default AppConfig if file doesn't exist.
    Raises ConfigError on malformed TOML or invalid config.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        return AppConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Malformed TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid configuration in {config_path}: {e}"
        raise ConfigError(msg) from e


def _env_value(env_var: str, field_name: str, value: str) -> Any:
    if field_name == "port":
        try:
            return int(value)
        except ValueError:
            msg = f"Invalid {env_var} value: '{value}'. Must be an integer"
            raise ConfigError(msg) from None
    return value


def resolve_config(
    config: AppConfig,
    profile_name: str | None = None,
    dsn: str | None = None,
    **cli_overrides: Any,
) -> ConnectionDescriptor:
    """Resolve configuration using precedence chain.

    CLI > DSN > env > profile > config defaults > built-in defaults.
    """
    sources: dict[str, str] = {}
    resolved: dict[str, Any] = {}

    # Layer 1: Built-in defaults
    resolved.update(_DEFAULTS)
    for key in resolved:
        sources[key] = "default"

    # Layer 2: Config file global defaults
    for key in ("connect_timeout", "statement_timeout"):
        if key in config.model_fields_set:
            resolved[key] = getattr(config, key)
            sources[key] = "config"

    # Layer 3: Named profile
    effective_profile = profile_name
    if not effective_profile:
        effective_profile = os.environ.get("PG_MCP_PROFILE")
    if not effective_profile:
        effective_profile = config.default_profile

    if effective_profile:
        if effective_profile not in config.profiles:
            available = (
                ", ".join(sorted(config.profiles.keys())) if config.profiles else "none"
            )
            msg = f"Unknown profile: '{effective_profile}'. Available profiles: {available}"
            raise ConfigError(msg)
        profile = config.profiles[effective_profile]
        for key in profile.model_fields_set:
            if key == "dsn":
                continue
            resolved[key] = getattr(profile, key)
            sources[key] = f"profile: {effective_profile}"

    # Layer 4: Environment variables
    for env_var, field_name in _ENV_VARS.items():
        value = os.environ.get(env_var)
        if value is not None:
            resolved[field_name] = _env_value(env_var, field_name, value)
            sources[field_name] = f"env: {env_var}"
    ssl_flag = os.environ.get("POSTGRES_SSL")
    if ssl_flag is not None:
        resolved["sslmode"] = "require" if ssl_flag.lower() == "true" else "disable"
        sources["sslmode"] = "env: POSTGRES_SSL"

    # Layer 5: DSN flag or POSTGRES_URL
    dsn_source = "dsn"
    if not dsn:
        dsn = os.environ.get("POSTGRES_URL")
        dsn_source = "env: POSTGRES_URL"
    if dsn:
        for key, value in parse_dsn(dsn).items():
            resolved[key] = value
            sources[key] = dsn_source

    # Layer 6: CLI flags (highest priority)
    cli_to_field = {
        "host": "host",
        "port": "port",
        "database": "database",
        "user": "user",
        "password": "password",  # pragma: allowlist secret
        "sslmode": "sslmode",
        "timeout": "statement_timeout",
    }
    for cli_name, field_name in cli_to_field.items():
        value = cli_overrides.get(cli_name)
        if value is not None:
            resolved[field_name] = value
            sources[field_name] = f"cli: --{cli_name}"

    resolved["active_profile"] = effective_profile
    resolved["sources"] = sources
    return build_descriptor(**resolved)


class ConnectionSettings:
    """Holds the current connection descriptor for the running server.

    The descriptor is immutable; ``update`` swaps in a new one, so readers
    always see a complete, consistent set of settings.
    """

    def __init__(self, descriptor: ConnectionDescriptor | None = None) -> None:
        self._descriptor = descriptor or ConnectionDescriptor()

    @property
    def descriptor(self) -> ConnectionDescriptor:
        return self._descriptor

    def is_configured(self) -> bool:
        return self._descriptor.is_configured

    def update(self, descriptor: ConnectionDescriptor) -> None:
        self._descriptor = descriptor
