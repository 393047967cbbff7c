"""
marketbook.config.postgres – PostgreSQL connection config (dataclass + validators).

Env vars: DATABASE_URL, DB_POOL_SIZE, DB_MAX_OVERFLOW, DB_POOL_TIMEOUT, DB_POOL_RECYCLE,
DB_ECHO, DB_APPLICATION_NAME.
"""
from __future__ import annotations

import os
from dataclasses import dataclass

_TRUTHY = ("1", "true", "yes")

_ENV_INT = {
    "pool_size": ("DB_POOL_SIZE", 10),
    "max_overflow": ("DB_MAX_OVERFLOW", 20),
    "pool_timeout": ("DB_POOL_TIMEOUT", 30),
    "pool_recycle": ("DB_POOL_RECYCLE", 1800),
}


def _check_url(url: str) -> str:
    url = (url or "").strip()
    if not url:
        raise ValueError("DATABASE_URL is required and must be non-empty")
    if not url.startswith(("postgresql://", "postgres://", "postgresql+asyncpg://")):
        raise ValueError(
            "DATABASE_URL must use postgresql://, postgres:// or postgresql+asyncpg://"
        )
    return url


def _check_int(value: int, name: str, min_val: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or value < min_val:
        raise ValueError(f"{name} must be an integer >= {min_val}, got {value!r}")


@dataclass(frozen=True)
class PostgresConfig:
    """
    Database connection and pool settings for the booking store.

    Validated on construction; see load_postgres_config() for env loading.
    """

    url: str
    pool_size: int = 10
    max_overflow: int = 20
    pool_timeout: int = 30
    # Seconds before a pooled connection is recycled
    pool_recycle: int = 1800
    echo: bool = False
    application_name: str = "marketbook-api"

    def __post_init__(self) -> None:
        _check_url(self.url)
        _check_int(self.pool_size, "pool_size", 1)
        _check_int(self.max_overflow, "max_overflow", 0)
        _check_int(self.pool_timeout, "pool_timeout", 1)
        _check_int(self.pool_recycle, "pool_recycle", 1)
        if not isinstance(self.echo, bool):
            raise ValueError("echo must be a boolean")
        if not isinstance(self.application_name, str) or not self.application_name.strip():
            raise ValueError("application_name must be a non-empty string")

    @property
    def async_url(self) -> str:
        """DSN rewritten for the asyncpg driver."""
        if self.url.startswith("postgresql+asyncpg://"):
            return self.url
        if self.url.startswith("postgres://"):
            return "postgresql+asyncpg://" + self.url[len("postgres://"):]
        return self.url.replace("postgresql://", "postgresql+asyncpg://", 1)

    @classmethod
    def from_env(cls, **overrides: object) -> PostgresConfig:
        """
        Build config from environment variables. Keyword overrides win.

        Env:
            DATABASE_URL          – default postgresql://localhost/marketbook
            DB_POOL_SIZE          – default 10
            DB_MAX_OVERFLOW       – default 20
            DB_POOL_TIMEOUT       – default 30
            DB_POOL_RECYCLE       – default 1800
            DB_ECHO               – "1" / "true" / "yes" → True
            DB_APPLICATION_NAME   – default marketbook-api
        """
        url = overrides.get("url")
        if url is None:
            url = os.environ.get("DATABASE_URL", "postgresql://localhost/marketbook")

        ints: dict[str, int] = {}
        for attr, (env_name, default) in _ENV_INT.items():
            value = overrides.get(attr)
            ints[attr] = int(value) if value is not None else int(os.environ.get(env_name, default))

        echo = overrides.get("echo")
        if echo is None:
            echo = os.environ.get("DB_ECHO", "").strip().lower() in _TRUTHY
        elif isinstance(echo, str):
            echo = echo.lower() in _TRUTHY

        app_name = overrides.get("application_name") or os.environ.get(
            "DB_APPLICATION_NAME", "marketbook-api"
        )
        return cls(url=_check_url(str(url)), echo=bool(echo), application_name=str(app_name), **ints)


def load_postgres_config(**overrides: object) -> PostgresConfig:
    """Load and validate PostgreSQL config. Raises ValueError on bad values."""
    return PostgresConfig.from_env(**overrides)
