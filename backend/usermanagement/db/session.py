"""Async Engine & Session Factory — engines shared by the app, migrations and test fixtures.

Invariants:
    - SQLite engines emit their own BEGIN so DDL runs inside the transaction
      (a failed migration rolls back CREATE/DROP/ALTER as well as data)
    - Pool sizing only applies to server databases
    - SQLite lower() is str.lower, so SQL search folds case like core.search_users

Design Decisions:
    - Separate from infrastructure/database.py: the migrator and test fixtures
      need a raw engine without the session manager
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker,
)


def is_sqlite(database_url: str) -> bool:
    return database_url.startswith("sqlite")


def _enable_sqlite_transactional_ddl(engine: AsyncEngine) -> None:
    """Let SQLite transactions cover DDL (driver BEGIN disabled, ours emitted)."""

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def _unicode_lower(value: str | None) -> str | None:
    return value.lower() if isinstance(value, str) else value


def _enable_sqlite_unicode_lower(engine: AsyncEngine) -> None:
    """Replace SQLite's ASCII-only lower() with str.lower on every connection."""

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.create_function("lower", 1, _unicode_lower)


def create_engine(database_url: str, **pool_kwargs) -> AsyncEngine:
    """Create an async engine; pool kwargs are ignored for SQLite."""
    if is_sqlite(database_url):
        engine = create_async_engine(database_url, echo=False)
        _enable_sqlite_transactional_ddl(engine)
        _enable_sqlite_unicode_lower(engine)
        return engine
    return create_async_engine(
        database_url, echo=False, pool_pre_ping=True, pool_recycle=3600,
        **pool_kwargs,
    )


def create_session_factory(
    engine: AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to the given engine."""
    return async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )
