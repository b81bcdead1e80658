"""Migration ledger and lock tables."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from cinestore.models.base import LedgerBase


class SchemaMigration(LedgerBase):
    """One row per applied migration. Rows are only ever inserted."""

    __tablename__ = "schema_migrations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    applied_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<SchemaMigration(id={self.id}, name={self.name!r})>"


class MigrationLock(LedgerBase):
    """
    Single-row lock held while a runner applies migrations.

    The fixed primary key makes a second insert fail, which is how a
    concurrent runner detects the lock.
    """

    __tablename__ = "schema_migration_lock"

    LOCK_ID = 1

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    holder: Mapped[str] = mapped_column(Text, nullable=False)
    acquired_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<MigrationLock(holder={self.holder!r}, acquired_at={self.acquired_at})>"
