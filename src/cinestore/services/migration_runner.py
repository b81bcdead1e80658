"""Migration runner that applies each change-set exactly once, tracked by a ledger."""

import logging
import os
import socket
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import Connection, delete, insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine

from cinestore import database
from cinestore.config import settings
from cinestore.database import run_with_timeout, storage_errors
from cinestore.errors import MigrationError, MigrationInProgress
from cinestore.migrations import Migration, load_migrations
from cinestore.models.base import LedgerBase
from cinestore.models.ledger import MigrationLock, SchemaMigration

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _run_upgrade(connection: Connection, migration: Migration) -> None:
    context = MigrationContext.configure(connection=connection)
    migration.upgrade(Operations(context))


class MigrationRunner:
    """
    Applies ordered schema migrations to a store.

    The schema_migrations ledger is the only source of truth for what has been
    applied; tables are never probed. Each migration and its ledger row commit
    in one transaction, and a lock row keeps concurrent runners out.
    """

    def __init__(self, bind: AsyncEngine | None = None, holder: str | None = None) -> None:
        """
        Initialize migration runner.

        Args:
            bind: Engine for the target store (uses the default engine if not provided)
            holder: Name recorded with the lock (defaults to host:pid)
        """
        self.engine = bind or database.engine
        self.holder = holder or f"{socket.gethostname()}:{os.getpid()}"

    async def apply(
        self,
        migrations: Sequence[Migration] | None = None,
        *,
        timeout: float | None = None,
    ) -> list[int]:
        """
        Apply every migration not yet recorded in the ledger.

        Args:
            migrations: Migrations to apply (uses the bundled ones if not provided)
            timeout: Seconds before giving up (uses settings if not provided)

        Returns:
            Ids applied by this run, in order. Empty when already up to date.

        Raises:
            MigrationError: A migration failed, or would run out of order
            MigrationInProgress: Another runner holds the lock
            StorageError: The store is unavailable
            OperationTimeoutError: The run exceeded the timeout
        """
        ordered = self._order(load_migrations() if migrations is None else migrations)
        if timeout is None:
            timeout = settings.migration_timeout
        return await run_with_timeout(self._apply(ordered), timeout, "apply migrations")

    async def stamp(self, ids: Iterable[int], *, timeout: float | None = None) -> list[int]:
        """
        Record migrations as applied without running them.

        Used to adopt a store whose tables were created out of band.

        Returns:
            Ids newly written to the ledger
        """
        if timeout is None:
            timeout = settings.migration_timeout
        return await run_with_timeout(self._stamp(sorted(set(ids))), timeout, "stamp migrations")

    async def applied_ids(self) -> set[int]:
        """Return the ids recorded in the ledger."""
        await self._ensure_ledger()
        return await self._load_applied()

    async def break_lock(self) -> bool:
        """
        Remove the migration lock regardless of who holds it.

        Only for recovering from a runner that died while holding the lock.

        Returns:
            True if a lock was removed
        """
        await self._ensure_ledger()
        with storage_errors("breaking migration lock"):
            async with self.engine.begin() as conn:
                result = await conn.execute(
                    delete(MigrationLock).where(MigrationLock.id == MigrationLock.LOCK_ID)
                )
        if result.rowcount:
            logger.warning("Removed migration lock")
            return True
        return False

    @staticmethod
    def _order(migrations: Sequence[Migration]) -> list[Migration]:
        ordered = sorted(migrations, key=lambda migration: migration.id)
        for previous, current in zip(ordered, ordered[1:]):
            if previous.id == current.id:
                raise ValueError(f"Duplicate migration id {current.id}")
        return ordered

    async def _apply(self, ordered: list[Migration]) -> list[int]:
        await self._ensure_ledger()
        await self._acquire_lock()
        try:
            applied = await self._load_applied()
            newly_applied: list[int] = []

            for migration in ordered:
                if migration.id in applied:
                    logger.debug(f"Migration {migration.id} already applied, skipping")
                    continue

                latest = max(applied, default=None)
                if latest is not None and migration.id < latest:
                    raise MigrationError(
                        migration.id,
                        f"unapplied but older than applied migration {latest}",
                    )

                await self._apply_one(migration)
                applied.add(migration.id)
                newly_applied.append(migration.id)

            if newly_applied:
                logger.info(f"Applied migrations {newly_applied}")
            else:
                logger.info("Schema is up to date")
            return newly_applied
        finally:
            await self._release_lock()

    async def _apply_one(self, migration: Migration) -> None:
        logger.info(f"Applying migration {migration.id} ({migration.name})")
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(_run_upgrade, migration)
                await conn.execute(
                    insert(SchemaMigration).values(
                        id=migration.id,
                        name=migration.name,
                        applied_at=_utcnow(),
                    )
                )
        except Exception as e:
            logger.error(f"Migration {migration.id} failed and was rolled back: {e}")
            raise MigrationError(migration.id, e) from e

    async def _stamp(self, ids: list[int]) -> list[int]:
        names = {migration.id: migration.name for migration in load_migrations()}
        await self._ensure_ledger()
        await self._acquire_lock()
        try:
            applied = await self._load_applied()
            stamped = [migration_id for migration_id in ids if migration_id not in applied]
            if stamped:
                with storage_errors("stamping migrations"):
                    async with self.engine.begin() as conn:
                        await conn.execute(
                            insert(SchemaMigration),
                            [
                                {
                                    "id": migration_id,
                                    "name": names.get(migration_id, "stamped"),
                                    "applied_at": _utcnow(),
                                }
                                for migration_id in stamped
                            ],
                        )
                logger.info(f"Stamped migrations {stamped} as applied")
            return stamped
        finally:
            await self._release_lock()

    async def _load_applied(self) -> set[int]:
        with storage_errors("reading migration ledger"):
            async with self.engine.connect() as conn:
                result = await conn.execute(select(SchemaMigration.id))
                return set(result.scalars().all())

    async def _ensure_ledger(self) -> None:
        with storage_errors("creating migration ledger"):
            async with self.engine.begin() as conn:
                await conn.run_sync(LedgerBase.metadata.create_all)

    async def _acquire_lock(self) -> None:
        with storage_errors("acquiring migration lock"):
            try:
                async with self.engine.begin() as conn:
                    await conn.execute(
                        insert(MigrationLock).values(
                            id=MigrationLock.LOCK_ID,
                            holder=self.holder,
                            acquired_at=_utcnow(),
                        )
                    )
            except IntegrityError as exc:
                holder = await self._lock_holder()
                logger.warning(f"Migration lock is held by {holder}")
                raise MigrationInProgress(f"Migration lock is held by {holder}") from exc
        logger.debug(f"Acquired migration lock as {self.holder}")

    async def _lock_holder(self) -> str | None:
        with storage_errors("reading migration lock"):
            async with self.engine.connect() as conn:
                result = await conn.execute(
                    select(MigrationLock.holder).where(MigrationLock.id == MigrationLock.LOCK_ID)
                )
                return result.scalar_one_or_none()

    async def _release_lock(self) -> None:
        with storage_errors("releasing migration lock"):
            async with self.engine.begin() as conn:
                await conn.execute(
                    delete(MigrationLock).where(
                        MigrationLock.id == MigrationLock.LOCK_ID,
                        MigrationLock.holder == self.holder,
                    )
                )
        logger.debug("Released migration lock")
