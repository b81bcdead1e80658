"""SQLAlchemy ORM models."""

from cinestore.models.base import Base, LedgerBase
from cinestore.models.cinema import Cinema
from cinestore.models.city import City
from cinestore.models.job_log import JobLog
from cinestore.models.ledger import MigrationLock, SchemaMigration
from cinestore.models.rating import Rating
from cinestore.models.show import Genre, Poster, Show
from cinestore.models.showtime import Showtime

__all__ = [
    "Base",
    "Cinema",
    "City",
    "Genre",
    "JobLog",
    "LedgerBase",
    "MigrationLock",
    "Poster",
    "Rating",
    "SchemaMigration",
    "Show",
    "Showtime",
]
