"""
Database configuration for DocGraph.

This module provides the async SQLAlchemy engine, session factory and
table creation for the document graph tables.

Supports:
- PostgreSQL (production, via asyncpg)
- SQLite (development/testing, via aiosqlite)
"""

import structlog
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from docgraph.config import DatabaseConfig

log = structlog.get_logger(__name__)

# ============================================================================
# Declarative Base
# ============================================================================

Base = declarative_base()

# ============================================================================
# Engine Configuration
# ============================================================================


def _set_sqlite_pragma(dbapi_conn, connection_record):
    """
    Enable foreign keys and performance settings for SQLite.

    - foreign_keys=ON: Enforce FK constraints (ON DELETE CASCADE included)
    - journal_mode=WAL: Write-Ahead Logging for better concurrency
    - synchronous=NORMAL: Balance between safety and performance
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


def create_engine(config: DatabaseConfig) -> AsyncEngine:
    """
    Create the async engine for ``config.url``.

    In-memory SQLite uses a single shared connection so every session sees
    the same database.
    """
    if config.is_sqlite:
        # SQLite doesn't support pool_size/max_overflow
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in config.url or config.url.rstrip("/").endswith("sqlite+aiosqlite:"):
            kwargs["poolclass"] = StaticPool
        engine = create_async_engine(config.url, echo=config.echo, **kwargs)
        event.listen(engine.sync_engine, "connect", _set_sqlite_pragma)
    else:
        # PostgreSQL with connection pooling
        engine = create_async_engine(
            config.url,
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
            pool_pre_ping=True,
            pool_recycle=3600,
            echo=config.echo,
        )

    log.info("Database engine created", url=config.sanitized_url())
    return engine


# ============================================================================
# Session Factory
# ============================================================================

def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,  # Don't expire objects after commit (for async)
    )


# ============================================================================
# Database Initialization
# ============================================================================

async def init_db(engine: AsyncEngine) -> None:
    """
    Create all tables defined in docgraph.storage.models.

    For production, use migrations instead.
    """
    async with engine.begin() as conn:
        # Import models to register them with Base
        from docgraph.storage import models  # noqa: F401

        await conn.run_sync(Base.metadata.create_all)


async def drop_all_tables(engine: AsyncEngine) -> None:
    """
    Drop all tables (useful for testing).

    WARNING: This will delete all data!
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
