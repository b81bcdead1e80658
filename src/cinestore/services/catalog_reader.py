"""Read access to the catalog, returning validated records."""

import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cinestore import database
from cinestore.config import settings
from cinestore.database import run_with_timeout, storage_errors
from cinestore.errors import ValidationError
from cinestore.models import Cinema, Genre, Showtime
from cinestore.schemas import catalog as schemas
from cinestore.schemas.catalog import CatalogRecord, EntityKind, record_type_for
from cinestore.services.catalog_writer import MODELS

logger = logging.getLogger(__name__)


class CatalogReader:
    """Queries used by callers to inspect what has been upserted."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self.session_factory = session_factory or database.AsyncSessionLocal

    async def get(
        self,
        kind: EntityKind | str,
        key: Any,
        *,
        timeout: float | None = None,
    ) -> CatalogRecord | None:
        """
        Fetch one record by primary key.

        Args:
            kind: Entity kind
            key: Slug, or a tuple of key values for composite keys
                (genre: show_slug, genre; showtime: show_slug, cinema_slug,
                time, auditorium_name)

        Returns:
            The record, or None if no row has that key
        """
        record_type = record_type_for(kind)
        key = key if isinstance(key, tuple) else (key,)
        if len(key) != len(record_type.key_fields):
            raise ValidationError(
                "key", key, f"expected {len(record_type.key_fields)} values for {record_type.kind.value}"
            )

        async def query() -> CatalogRecord | None:
            async with self.session_factory() as session:
                row = await session.get(MODELS[record_type.kind], key)
                if row is None:
                    return None
                return record_type.model_validate(row, from_attributes=True)

        return await self._run(query(), timeout, f"get {record_type.kind.value}")

    async def count(self, kind: EntityKind | str, *, timeout: float | None = None) -> int:
        """Count the stored rows of a kind."""
        model = MODELS[record_type_for(kind).kind]

        async def query() -> int:
            async with self.session_factory() as session:
                result = await session.execute(select(func.count()).select_from(model))
                return result.scalar_one()

        return await self._run(query(), timeout, "count")

    async def cinemas_in_city(
        self, city_slug: str, *, timeout: float | None = None
    ) -> list[schemas.Cinema]:
        """List the cinemas of a city ordered by name."""

        async def query() -> list[schemas.Cinema]:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(Cinema).where(Cinema.city_slug == city_slug).order_by(Cinema.name)
                )
                return [
                    schemas.Cinema.model_validate(row, from_attributes=True)
                    for row in result.scalars().all()
                ]

        return await self._run(query(), timeout, "list cinemas")

    async def genres_for_show(self, show_slug: str, *, timeout: float | None = None) -> list[str]:
        """Genres of a show in alphabetical order."""

        async def query() -> list[str]:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(Genre.genre).where(Genre.show_slug == show_slug).order_by(Genre.genre)
                )
                return list(result.scalars().all())

        return await self._run(query(), timeout, "list genres")

    async def showtimes_for_show(
        self,
        show_slug: str,
        cinema_slug: str | None = None,
        *,
        timeout: float | None = None,
    ) -> list[schemas.Showtime]:
        """
        List the showtimes of a show, optionally at a single cinema.

        Ordered by cinema, then by the time string as published.
        """

        async def query() -> list[schemas.Showtime]:
            stmt = select(Showtime).where(Showtime.show_slug == show_slug)
            if cinema_slug is not None:
                stmt = stmt.where(Showtime.cinema_slug == cinema_slug)
            stmt = stmt.order_by(Showtime.cinema_slug, Showtime.time, Showtime.auditorium_name)
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                return [
                    schemas.Showtime.model_validate(row, from_attributes=True)
                    for row in result.scalars().all()
                ]

        return await self._run(query(), timeout, "list showtimes")

    async def _run(self, coro, timeout: float | None, operation: str):
        if timeout is None:
            timeout = settings.query_timeout
        with storage_errors(operation):
            return await run_with_timeout(coro, timeout, operation)
