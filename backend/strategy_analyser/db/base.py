"""Declarative base and the process-wide async engine of the run store."""
from __future__ import annotations

from typing import Any

from sqlalchemy import MetaData, event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase


NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=NAMING_CONVENTION)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    metadata = metadata


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    # Cascading deletes of run children need foreign keys switched on per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine(database_url: str, **kwargs: Any) -> AsyncEngine:
    """Create the shared engine and its session factory once per process."""

    global _engine, _session_factory

    if _engine is None:
        _engine = create_async_engine(database_url, **kwargs)
        if _engine.dialect.name == "sqlite":
            event.listen(_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        _session_factory = async_sessionmaker(_engine, expire_on_commit=False)

    return _engine


def create_session(**kwargs: Any) -> AsyncSession:
    if _session_factory is None:  # pragma: no cover - startup ordering guard
        raise RuntimeError("Database engine has not been initialised")
    return _session_factory(**kwargs)


async def create_schema() -> None:
    """Create every table known to the metadata that does not exist yet."""

    if _engine is None:  # pragma: no cover - startup ordering guard
        raise RuntimeError("Database engine has not been initialised")
    async with _engine.begin() as connection:
        await connection.run_sync(metadata.create_all)


async def dispose_engine() -> None:
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


__all__ = [
    "Base",
    "create_engine",
    "create_schema",
    "create_session",
    "dispose_engine",
    "metadata",
]
