"""Declarative bases for catalog tables and the migration ledger."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for catalog and job log models. Tables are created by migrations."""


class LedgerBase(DeclarativeBase):
    """Base class for migration bookkeeping tables, created by the runner itself."""
