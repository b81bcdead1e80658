"""Error types raised by the migration, upsert and job log services."""

from typing import Any


class CinestoreError(Exception):
    """Base class for all cinestore errors."""


class MigrationError(CinestoreError):
    """A migration failed and was rolled back. Later migrations were not attempted."""

    def __init__(self, migration_id: int, cause: BaseException | str) -> None:
        self.migration_id = migration_id
        self.cause = cause
        super().__init__(f"Migration {migration_id} failed: {cause}")


class MigrationInProgress(CinestoreError):
    """Another runner holds the migration lock."""


class ReferentialError(CinestoreError):
    """A record references a parent that is neither in the batch nor in the store."""

    def __init__(self, missing_ref: str) -> None:
        self.missing_ref = missing_ref
        super().__init__(f"Missing referenced record: {missing_ref}")


class ValidationError(CinestoreError):
    """A record field holds a value outside its documented domain."""

    def __init__(self, field: str, value: Any, reason: str | None = None) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        message = f"Invalid value for {field!r}: {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class StorageError(CinestoreError):
    """The underlying store failed or is unavailable."""


class OperationTimeoutError(CinestoreError, TimeoutError):
    """An operation exceeded its caller-supplied timeout and was rolled back."""

    def __init__(self, operation: str, timeout: float) -> None:
        self.operation = operation
        self.timeout = timeout
        super().__init__(f"{operation} timed out after {timeout}s")
