"""Pydantic schemas for validated records."""

from cinestore.schemas.catalog import (
    RECORD_TYPES,
    UPSERT_ORDER,
    CatalogRecord,
    Cinema,
    City,
    EntityKind,
    Genre,
    Poster,
    Rating,
    Show,
    Showtime,
    record_type_for,
    validate_record,
)
from cinestore.schemas.job_log import JobRun

__all__ = [
    "RECORD_TYPES",
    "UPSERT_ORDER",
    "CatalogRecord",
    "Cinema",
    "City",
    "EntityKind",
    "Genre",
    "JobRun",
    "Poster",
    "Rating",
    "Show",
    "Showtime",
    "record_type_for",
    "validate_record",
]
