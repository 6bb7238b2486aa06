"""
CRUD Gateway: Relational Session Management
============================================

What:  Async SQLAlchemy engine factory, declarative base, per-request session
       dependency and the database-selection step.
How:   `create_engine_from_settings()` builds an engine whose queue pool is the
       relational connection pool. `get_db_session()` checks a connection out
       for exactly one request, selects the configured database on it, and
       guarantees the connection goes back to the pool on every exit path.
Who:   `Backends` owns the engine; route handlers receive sessions via Depends().
When:  Engine built once at startup (it connects lazily); sessions per request.

Pooling:
    pool_size:      persistent connections (DB_POOL_SIZE)
    max_overflow:   temporary extra connections under load (DB_MAX_OVERFLOW)
    pool_pre_ping:  validates a connection before handing it out
    pool_recycle:   3600s, below MySQL's default wait_timeout
    A checkout waits when the pool is exhausted; SQLAlchemy's pool_timeout
    (30s) bounds that wait.
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncConnection,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from crudgateway.config import Settings
from crudgateway.exceptions import RelationalStoreError


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models; owns the shared metadata."""
    pass


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """
    Build the async engine for `settings.relational_url`.

    SQLite (used by the test suite) gets no pool sizing arguments: its
    dialect picks a pool class that rejects them.
    """
    url = settings.relational_url
    kwargs = {"echo": settings.log_level == "DEBUG"}
    if not url.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(url, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: returned ORM objects stay readable after commit
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


def use_database_statement(dialect_name: str, db_name: str, quote) -> str | None:
    """
    The statement that selects `db_name` on a fresh checkout, or None.

    Only MySQL has a server-level connection that needs it; SQLite
    connections are bound to a single file.
    """
    if dialect_name != "mysql":
        return None
    return f"USE {quote(db_name)}"


async def select_database(conn: AsyncConnection | AsyncSession, db_name: str) -> None:
    """Issue `USE <db_name>` on the connection behind `conn` when the dialect needs it."""
    bind = conn.bind if isinstance(conn, AsyncSession) else conn
    dialect = bind.dialect
    statement = use_database_statement(
        dialect.name, db_name, dialect.identifier_preparer.quote_identifier
    )
    if statement is not None:
        await conn.execute(text(statement))


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency providing one pooled, database-selected session per request.

    How it works:
        1. Opens a session from the factory stored on app.state.backends
        2. Selects the configured database (MySQL only)
        3. Yields it to the handler; services commit their own writes
        4. On any error: rolls back and re-raises
        5. Always: the `async with` block closes the session, returning the
           connection to the pool even when the handler raised

    Raises:
        RelationalStoreError: checkout or database selection failed.
    """
    backends = request.app.state.backends
    db_name = request.app.state.settings.db_name

    async with backends.session_factory() as session:
        try:
            await select_database(session, db_name)
        except SQLAlchemyError as exc:
            raise RelationalStoreError(details=raw_error_text(exc)) from exc

        try:
            yield session
        except Exception:
            await session.rollback()
            raise


def raw_error_text(exc: SQLAlchemyError) -> str:
    """
    The driver's own message for a SQLAlchemy error.

    DBAPIError wraps the driver exception in `.orig`; its text is what the
    server reported (e.g. "(1049, \"Unknown database 'x'\")") without the
    SQL statement SQLAlchemy appends.
    """
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)
