"""Transactional upserts of catalog records in foreign key order."""

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, TypeVar

from sqlalchemy import Table, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cinestore import database
from cinestore.config import settings
from cinestore.database import run_with_timeout, storage_errors
from cinestore.errors import ReferentialError, StorageError, ValidationError
from cinestore.models import Base, Cinema, City, Genre, Poster, Rating, Show, Showtime
from cinestore.schemas.catalog import (
    RECORD_TYPES,
    UPSERT_ORDER,
    CatalogRecord,
    EntityKind,
    record_type_for,
    validate_record,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

MODELS: dict[EntityKind, type[Base]] = {
    EntityKind.CITY: City,
    EntityKind.CINEMA: Cinema,
    EntityKind.RATING: Rating,
    EntityKind.SHOW: Show,
    EntityKind.POSTER: Poster,
    EntityKind.GENRE: Genre,
    EntityKind.SHOWTIME: Showtime,
}

# Records grouped by kind, then keyed by primary key
Grouped = dict[EntityKind, dict[tuple[Any, ...], CatalogRecord]]


@dataclass
class UpsertResult:
    """Rows written per entity kind by one batch."""

    written: dict[EntityKind, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(self.written.values())


def _insert_for(dialect_name: str) -> Callable[[Table], Any]:
    if dialect_name == "postgresql":
        return postgresql.insert
    if dialect_name == "sqlite":
        return sqlite.insert
    raise StorageError(f"Upserts are not supported on the {dialect_name} dialect")


def _chunks(items: Sequence[T], size: int) -> Iterable[Sequence[T]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


class CatalogWriter:
    """
    Writes validated catalog records with insert-or-replace semantics.

    A batch may mix entity kinds in any order. Within one transaction the
    writer checks that every referenced parent exists in the batch or the
    store, then writes parents before children. Either the whole batch is
    committed or nothing is.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        chunk_size: int | None = None,
    ) -> None:
        """
        Initialize catalog writer.

        Args:
            session_factory: Session factory (uses the default if not provided)
            chunk_size: Rows per INSERT statement (uses settings if not provided)
        """
        self.session_factory = session_factory or database.AsyncSessionLocal
        self.chunk_size = chunk_size or settings.upsert_chunk_size

    async def upsert_batch(
        self,
        kind: EntityKind | str,
        records: Sequence[CatalogRecord | Mapping[str, Any]],
        *,
        timeout: float | None = None,
    ) -> UpsertResult:
        """
        Upsert records of a single kind.

        Args:
            kind: Entity kind of every record
            records: Records or raw mappings, validated against the kind's schema
            timeout: Seconds before the batch is rolled back (uses settings if not provided)

        Raises:
            ValidationError: A record is invalid or of another kind
            ReferentialError: A referenced parent does not exist
            StorageError: The store failed
            OperationTimeoutError: The batch exceeded the timeout
        """
        kind = record_type_for(kind).kind
        validated = [validate_record(kind, record) for record in records]
        return await self._run(validated, timeout)

    async def upsert(
        self,
        records: Sequence[CatalogRecord],
        *,
        timeout: float | None = None,
    ) -> UpsertResult:
        """
        Upsert a mixed-kind batch, such as a full catalog refresh.

        Same guarantees and errors as upsert_batch().
        """
        validated = []
        for record in records:
            if not isinstance(record, CatalogRecord):
                raise ValidationError("record", record, "expected a catalog record")
            validated.append(validate_record(record.kind, record))
        return await self._run(validated, timeout)

    async def _run(self, records: list[CatalogRecord], timeout: float | None) -> UpsertResult:
        if timeout is None:
            timeout = settings.upsert_timeout
        grouped = self._group(records)
        return await run_with_timeout(self._write(grouped), timeout, "upsert batch")

    @staticmethod
    def _group(records: list[CatalogRecord]) -> Grouped:
        grouped: Grouped = {}
        for record in records:
            # Later records replace earlier ones with the same key
            grouped.setdefault(record.kind, {})[record.key()] = record
        return grouped

    async def _write(self, grouped: Grouped) -> UpsertResult:
        result = UpsertResult()
        if not grouped:
            return result

        with storage_errors("upserting catalog batch"):
            async with self.session_factory() as session:
                async with session.begin():
                    await self._check_references(session, grouped)

                    conn = await session.connection()
                    insert = _insert_for(conn.dialect.name)

                    for kind in UPSERT_ORDER:
                        records = grouped.get(kind)
                        if not records:
                            continue
                        table = MODELS[kind].__table__
                        rows = [record.row() for record in records.values()]
                        for chunk in _chunks(rows, self.chunk_size):
                            await session.execute(self._upsert_statement(insert, table, chunk))
                        result.written[kind] = len(rows)

        summary = ", ".join(f"{kind.value}={count}" for kind, count in result.written.items())
        logger.info(f"Upserted {result.total} catalog rows ({summary})")
        return result

    @staticmethod
    def _upsert_statement(insert: Callable[[Table], Any], table: Table, rows: list[dict[str, Any]]):
        stmt = insert(table).values(rows)
        key_columns = [column.name for column in table.primary_key.columns]
        updates = {
            column.name: stmt.excluded[column.name]
            for column in table.columns
            if column.name not in key_columns
        }
        if not updates:
            return stmt.on_conflict_do_nothing(index_elements=key_columns)
        return stmt.on_conflict_do_update(index_elements=key_columns, set_=updates)

    async def _check_references(self, session: AsyncSession, grouped: Grouped) -> None:
        for kind in UPSERT_ORDER:
            records = grouped.get(kind)
            if not records:
                continue
            for field_name, parent_kind in RECORD_TYPES[kind].references:
                wanted = {getattr(record, field_name) for record in records.values()}
                wanted.discard(None)
                # Parents are keyed by slug alone
                missing = wanted - {key[0] for key in grouped.get(parent_kind, {})}
                if missing:
                    missing -= await self._existing_slugs(session, parent_kind, missing)
                if missing:
                    missing_ref = f"{parent_kind.value}:{sorted(missing)[0]}"
                    logger.warning(
                        f"Rejecting batch: {kind.value}.{field_name} references "
                        f"missing {missing_ref}"
                    )
                    raise ReferentialError(missing_ref)

    async def _existing_slugs(
        self, session: AsyncSession, kind: EntityKind, slugs: set[str]
    ) -> set[str]:
        model = MODELS[kind]
        found: set[str] = set()
        for chunk in _chunks(sorted(slugs), self.chunk_size):
            result = await session.execute(select(model.slug).where(model.slug.in_(chunk)))
            found.update(result.scalars().all())
        return found
