"""Database engine, session management and transaction helpers."""

import asyncio
import logging
from collections.abc import Awaitable, Iterator
from contextlib import contextmanager
from typing import TypeVar

from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from cinestore.config import settings
from cinestore.errors import OperationTimeoutError, StorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def create_engine(database_url: str | None = None, echo: bool | None = None) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    SQLite connections get foreign key enforcement and real transactional DDL,
    which the driver's default transaction handling would otherwise skip.

    Args:
        database_url: SQLAlchemy URL (uses settings if not provided)
        echo: Log emitted SQL (uses settings if not provided)

    Returns:
        Configured AsyncEngine
    """
    url = database_url or settings.database_url
    new_engine = create_async_engine(
        url,
        echo=settings.db_echo if echo is None else echo,
        future=True,
    )
    if new_engine.dialect.name == "sqlite":
        _configure_sqlite(new_engine)
    return new_engine


def _configure_sqlite(sqlite_engine: AsyncEngine) -> None:
    @event.listens_for(sqlite_engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Let SQLAlchemy emit BEGIN itself so DDL is covered by the transaction
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(sqlite_engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to the given engine."""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


# Default engine and session factory built from settings
engine = create_engine()
AsyncSessionLocal = create_session_factory(engine)


async def run_with_timeout(awaitable: Awaitable[T], timeout: float | None, operation: str) -> T:
    """
    Await an operation, cancelling it once the timeout expires.

    Cancellation propagates into the operation, so any transaction it holds
    open is rolled back before OperationTimeoutError is raised.
    """
    if timeout is None:
        return await awaitable
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except OperationTimeoutError:
        raise
    except asyncio.TimeoutError as exc:
        logger.warning(f"{operation} timed out after {timeout}s")
        raise OperationTimeoutError(operation, timeout) from exc


@contextmanager
def storage_errors(action: str) -> Iterator[None]:
    """Translate driver and connection failures raised inside the block into StorageError."""
    try:
        yield
    except TimeoutError:
        raise
    except (SQLAlchemyError, OSError) as exc:
        logger.error(f"Storage failure while {action}: {exc}")
        raise StorageError(f"{action} failed: {exc}") from exc
