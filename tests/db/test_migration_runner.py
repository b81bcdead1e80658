"""Tests for the migration runner against a SQLite store."""

from datetime import datetime, timezone

import pytest
from sqlalchemy import inspect, insert
from sqlalchemy.ext.asyncio import AsyncEngine

from cinestore.errors import MigrationError, MigrationInProgress
from cinestore.migrations import Migration
from cinestore.models.ledger import MigrationLock
from cinestore.services.migration_runner import MigrationRunner


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def make_migration(migration_id: int, *statements: str, calls: list[int] | None = None) -> Migration:
    """Migration that records its id in calls and executes raw SQL statements."""

    def upgrade(op) -> None:
        if calls is not None:
            calls.append(migration_id)
        for statement in statements:
            op.execute(statement)

    return Migration(id=migration_id, name=f"test migration {migration_id}", upgrade=upgrade)


async def table_names(engine: AsyncEngine) -> set[str]:
    async with engine.connect() as conn:
        return set(await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names()))


async def column_names(engine: AsyncEngine, table: str) -> list[str]:
    async with engine.connect() as conn:
        columns = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_columns(table))
    return [column["name"] for column in columns]


CATALOG_TABLES = {
    "cities",
    "cinemas",
    "ratings",
    "shows",
    "posters",
    "genres",
    "showtimes",
    "joblogs",
}


# ---------------------------------------------------------------------------
# Bundled migrations
# ---------------------------------------------------------------------------


class TestBundledMigrations:
    @pytest.mark.asyncio
    async def test_creates_full_schema(self, engine: AsyncEngine) -> None:
        applied = await MigrationRunner(engine).apply()

        assert applied == [1, 2, 3]
        assert CATALOG_TABLES <= await table_names(engine)

    @pytest.mark.asyncio
    async def test_ratings_migration_extends_shows(self, engine: AsyncEngine) -> None:
        await MigrationRunner(engine).apply()

        assert await column_names(engine, "shows") == [
            "slug",
            "title",
            "release_at",
            "movie_type",
            "duration",
            "rating_slug",
            "rating_match_score",
        ]

    @pytest.mark.asyncio
    async def test_shows_reference_ratings(self, engine: AsyncEngine) -> None:
        await MigrationRunner(engine).apply()

        async with engine.connect() as conn:
            foreign_keys = await conn.run_sync(
                lambda sync_conn: inspect(sync_conn).get_foreign_keys("shows")
            )
        assert [(fk["constrained_columns"], fk["referred_table"]) for fk in foreign_keys] == [
            (["rating_slug"], "ratings")
        ]

    @pytest.mark.asyncio
    async def test_joblogs_has_descending_index(self, engine: AsyncEngine) -> None:
        await MigrationRunner(engine).apply()

        async with engine.connect() as conn:
            indexes = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_indexes("joblogs"))
        assert [index["name"] for index in indexes] == ["dt_index"]

    @pytest.mark.asyncio
    async def test_second_run_is_a_no_op(self, engine: AsyncEngine) -> None:
        runner = MigrationRunner(engine)
        await runner.apply()
        tables_before = await table_names(engine)
        columns_before = await column_names(engine, "shows")

        applied = await runner.apply()

        assert applied == []
        assert await table_names(engine) == tables_before
        assert await column_names(engine, "shows") == columns_before
        assert await runner.applied_ids() == {1, 2, 3}


# ---------------------------------------------------------------------------
# Ordering and failure handling
# ---------------------------------------------------------------------------


class TestApply:
    @pytest.mark.asyncio
    async def test_applies_in_ascending_id_order(self, engine: AsyncEngine) -> None:
        calls: list[int] = []
        migrations = [
            make_migration(3, "CREATE TABLE c (id INTEGER)", calls=calls),
            make_migration(1, "CREATE TABLE a (id INTEGER)", calls=calls),
            make_migration(2, "CREATE TABLE b (id INTEGER)", calls=calls),
        ]

        applied = await MigrationRunner(engine).apply(migrations)

        assert calls == [1, 2, 3]
        assert applied == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_rejects_migration_older_than_applied(self, engine: AsyncEngine) -> None:
        runner = MigrationRunner(engine)
        first = make_migration(1, "CREATE TABLE a (id INTEGER)")
        late = make_migration(2, "CREATE TABLE b (id INTEGER)")
        third = make_migration(3, "CREATE TABLE c (id INTEGER)")
        await runner.apply([first, third])

        with pytest.raises(MigrationError) as exc_info:
            await runner.apply([first, late, third])

        assert exc_info.value.migration_id == 2
        assert "b" not in await table_names(engine)
        assert await runner.applied_ids() == {1, 3}

    @pytest.mark.asyncio
    async def test_failed_migration_rolls_back_and_halts(self, engine: AsyncEngine) -> None:
        calls: list[int] = []
        migrations = [
            make_migration(1, "CREATE TABLE a (id INTEGER)", calls=calls),
            make_migration(
                2,
                "CREATE TABLE partial (id INTEGER)",
                "INSERT INTO no_such_table VALUES (1)",
                calls=calls,
            ),
            make_migration(3, "CREATE TABLE c (id INTEGER)", calls=calls),
        ]
        runner = MigrationRunner(engine)

        with pytest.raises(MigrationError) as exc_info:
            await runner.apply(migrations)

        assert exc_info.value.migration_id == 2
        assert exc_info.value.cause is not None
        assert calls == [1, 2]
        tables = await table_names(engine)
        assert "a" in tables
        assert "partial" not in tables
        assert "c" not in tables
        assert await runner.applied_ids() == {1}

    @pytest.mark.asyncio
    async def test_lock_released_after_failure(self, engine: AsyncEngine) -> None:
        runner = MigrationRunner(engine)
        with pytest.raises(MigrationError):
            await runner.apply([make_migration(1, "NOT VALID SQL")])

        applied = await runner.apply([make_migration(1, "CREATE TABLE a (id INTEGER)")])

        assert applied == [1]

    @pytest.mark.asyncio
    async def test_ledger_decides_what_is_applied(self, engine: AsyncEngine) -> None:
        runner = MigrationRunner(engine)
        await runner.apply([make_migration(1, "CREATE TABLE a (id INTEGER)")])

        # Same id with different statements is still considered applied
        applied = await runner.apply([make_migration(1, "CREATE TABLE other (id INTEGER)")])

        assert applied == []
        assert "other" not in await table_names(engine)


# ---------------------------------------------------------------------------
# Locking and stamping
# ---------------------------------------------------------------------------


class TestLocking:
    async def hold_lock(self, engine: AsyncEngine, holder: str) -> None:
        async with engine.begin() as conn:
            await conn.execute(
                insert(MigrationLock).values(
                    id=MigrationLock.LOCK_ID,
                    holder=holder,
                    acquired_at=datetime.now(timezone.utc),
                )
            )

    @pytest.mark.asyncio
    async def test_fails_fast_when_lock_is_held(self, engine: AsyncEngine) -> None:
        runner = MigrationRunner(engine, holder="second")
        await runner.applied_ids()  # creates the ledger tables
        await self.hold_lock(engine, "first")

        with pytest.raises(MigrationInProgress, match="first"):
            await runner.apply([make_migration(1, "CREATE TABLE a (id INTEGER)")])

        assert await runner.applied_ids() == set()

    @pytest.mark.asyncio
    async def test_break_lock_allows_next_run(self, engine: AsyncEngine) -> None:
        runner = MigrationRunner(engine, holder="second")
        await runner.applied_ids()
        await self.hold_lock(engine, "crashed")

        assert await runner.break_lock() is True
        assert await runner.break_lock() is False
        assert await runner.apply([make_migration(1, "CREATE TABLE a (id INTEGER)")]) == [1]


class TestStamp:
    @pytest.mark.asyncio
    async def test_adopts_tables_created_out_of_band(self, engine: AsyncEngine) -> None:
        async with engine.begin() as conn:
            await conn.exec_driver_sql("CREATE TABLE a (id INTEGER)")
        runner = MigrationRunner(engine)
        first = make_migration(1, "CREATE TABLE a (id INTEGER)")
        second = make_migration(2, "ALTER TABLE a ADD COLUMN name TEXT")

        with pytest.raises(MigrationError):
            await runner.apply([first, second])

        assert await runner.stamp([1]) == [1]
        assert await runner.apply([first, second]) == [2]
        assert await column_names(engine, "a") == ["id", "name"]

    @pytest.mark.asyncio
    async def test_stamp_skips_recorded_ids(self, engine: AsyncEngine) -> None:
        runner = MigrationRunner(engine)
        await runner.apply([make_migration(1, "CREATE TABLE a (id INTEGER)")])

        assert await runner.stamp([1, 2]) == [2]
        assert await runner.applied_ids() == {1, 2}
