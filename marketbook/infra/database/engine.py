"""
marketbook.infra.database.engine – async SQLAlchemy engine and session factory.

build_engine() and build_session_factory() cache their result for the process;
close_engine() disposes both. ensure_database_exists() creates the target
database on first run by connecting to "postgres" with asyncpg.
"""
from __future__ import annotations

import logging
import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Optional
from urllib.parse import urlparse, urlunparse

import asyncpg
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

# Registers every model with Base.metadata before create_all()
import marketbook.infra.database.models  # noqa: F401
from marketbook.infra.database.models.base import Base

if TYPE_CHECKING:
    from marketbook.config import PostgresConfig

logger = logging.getLogger(__name__)

# Database names we are willing to interpolate into CREATE DATABASE
_DBNAME_PATTERN = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def _load_config(config: Optional["PostgresConfig"]) -> "PostgresConfig":
    if config is not None:
        return config
    from marketbook.config import load_postgres_config
    return load_postgres_config()


def _split_db_url(url: str) -> tuple[str, str]:
    """Return (target database name, DSN pointing at the "postgres" database)."""
    parsed = urlparse(url.replace("postgresql+asyncpg://", "postgresql://", 1))
    dbname = (parsed.path or "/postgres").strip("/").split("?")[0].strip() or "postgres"
    admin_url = urlunparse((parsed.scheme, parsed.netloc, "/postgres", parsed.params, parsed.query, parsed.fragment))
    return dbname, admin_url


async def ensure_database_exists(config: Optional["PostgresConfig"] = None) -> None:
    """Create the configured database if missing; skipped when postgres is unreachable."""
    config = _load_config(config)
    dbname, admin_url = _split_db_url(config.url)
    if dbname == "postgres":
        return
    if not _DBNAME_PATTERN.match(dbname):
        logger.warning("ensure_database_exists: refusing unsafe database name %r", dbname)
        return
    try:
        conn = await asyncpg.connect(admin_url)
    except (OSError, asyncpg.PostgresError) as exc:
        logger.debug("ensure_database_exists: cannot reach postgres (%s), skipping", exc)
        return
    try:
        exists = await conn.fetchval("SELECT 1 FROM pg_database WHERE datname = $1", dbname)
        if exists is None:
            await conn.execute(f'CREATE DATABASE "{dbname}"')
            logger.info("Created database %s", dbname)
    finally:
        await conn.close()


def build_engine(
    config: Optional["PostgresConfig"] = None,
    *,
    echo: Optional[bool] = None,
    use_null_pool: bool = False,
) -> AsyncEngine:
    """Create (once) the async engine; ``use_null_pool`` disables pooling for tests."""
    global _engine
    if _engine is not None:
        return _engine

    config = _load_config(config)
    connect_args: dict = {"server_settings": {"application_name": config.application_name}}
    do_echo = config.echo if echo is None else echo

    if use_null_pool:
        _engine = create_async_engine(
            config.async_url, echo=do_echo, poolclass=NullPool, connect_args=connect_args
        )
        logger.info("AsyncEngine created with NullPool")
    else:
        _engine = create_async_engine(
            config.async_url,
            echo=do_echo,
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
            pool_timeout=config.pool_timeout,
            pool_recycle=config.pool_recycle,
            pool_pre_ping=True,
            connect_args=connect_args,
        )
        logger.info("AsyncEngine created: pool_size=%d max_overflow=%d", config.pool_size, config.max_overflow)
    return _engine


def build_session_factory(
    engine: Optional[AsyncEngine] = None,
) -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is not None:
        return _session_factory
    _session_factory = async_sessionmaker(
        engine or build_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    return _session_factory


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Yield a session that commits on success and rolls back on error."""
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db(config: Optional["PostgresConfig"] = None, *, drop_all: bool = False) -> None:
    """Create all tables. Dev/test convenience; production runs migrations."""
    engine = build_engine(_load_config(config))
    async with engine.begin() as conn:
        if drop_all:
            logger.warning("Dropping all ORM tables (drop_all=True)")
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")


async def close_engine() -> None:
    """Dispose the pool. Call on app shutdown."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        logger.info("AsyncEngine disposed")
    _engine = None
    _session_factory = None
