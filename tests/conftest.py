"""Shared test fixtures."""

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from cinestore.database import create_engine, create_session_factory
from cinestore.services.catalog_reader import CatalogReader
from cinestore.services.catalog_writer import CatalogWriter
from cinestore.services.job_log import JobLogRecorder
from cinestore.services.migration_runner import MigrationRunner


@pytest_asyncio.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """Engine on a throwaway SQLite file with no tables."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'cinestore.db'}", echo=False)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest_asyncio.fixture
async def migrated(engine: AsyncEngine) -> AsyncEngine:
    """Engine with every bundled migration applied."""
    await MigrationRunner(engine, holder="tests").apply()
    return engine


@pytest.fixture
def writer(migrated: AsyncEngine, session_factory: async_sessionmaker[AsyncSession]) -> CatalogWriter:
    return CatalogWriter(session_factory)


@pytest.fixture
def reader(migrated: AsyncEngine, session_factory: async_sessionmaker[AsyncSession]) -> CatalogReader:
    return CatalogReader(session_factory)


@pytest.fixture
def recorder(migrated: AsyncEngine, session_factory: async_sessionmaker[AsyncSession]) -> JobLogRecorder:
    return JobLogRecorder(session_factory)
