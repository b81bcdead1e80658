"""Migration definitions and discovery of the bundled version modules."""

import importlib
import logging
import pkgutil
from collections.abc import Callable
from dataclasses import dataclass

from alembic.operations import Operations

from cinestore.migrations import versions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Migration:
    """
    A single schema change-set.

    Attributes:
        id: Ordering key; migrations apply in ascending id order
        name: Human-readable label stored in the ledger
        upgrade: Callable issuing the DDL statements through alembic Operations
    """

    id: int
    name: str
    upgrade: Callable[[Operations], None]


def load_migrations() -> list[Migration]:
    """
    Discover the bundled migrations, sorted by id.

    Each module under cinestore.migrations.versions defines an integer
    ``revision`` and an ``upgrade(op)`` function; the first docstring line is
    used as the migration name.
    """
    migrations = []
    for module_info in pkgutil.iter_modules(versions.__path__):
        module = importlib.import_module(f"{versions.__name__}.{module_info.name}")
        doc = (module.__doc__ or module_info.name).strip()
        migrations.append(
            Migration(
                id=module.revision,
                name=doc.splitlines()[0],
                upgrade=module.upgrade,
            )
        )
    migrations.sort(key=lambda migration: migration.id)
    logger.debug(f"Loaded {len(migrations)} bundled migrations")
    return migrations


__all__ = ["Migration", "load_migrations"]
