"""
Store factory.

Resolves the persistence backend once from settings and hands out one set
of repositories for the whole process.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from techmaintain.adapters.memory import (
    InMemoryEmailQueueRepo,
    InMemoryMaintenanceLogRepo,
    InMemoryRequestRepo,
    InMemoryTemplateRepo,
    InMemoryUserRepo,
)
from techmaintain.adapters.sqlite.migrator import SQLiteMigrator
from techmaintain.adapters.sqlite.repos import (
    SQLiteEmailQueueRepo,
    SQLiteMaintenanceLogRepo,
    SQLiteRequestRepo,
    SQLiteTemplateRepo,
    SQLiteUserRepo,
)

if TYPE_CHECKING:
    from techmaintain.app_shell.config import Settings

logger = logging.getLogger(__name__)


@dataclass
class Store:
    """Repositories for one backend."""

    backend: str
    templates: Any
    requests: Any
    logs: Any
    emails: Any
    users: Any


def create_memory_store() -> Store:
    return Store(
        backend="memory",
        templates=InMemoryTemplateRepo(),
        requests=InMemoryRequestRepo(),
        logs=InMemoryMaintenanceLogRepo(),
        emails=InMemoryEmailQueueRepo(),
        users=InMemoryUserRepo(),
    )


def create_sqlite_store(db_path: str, migrations_dir: str | None = None) -> Store:
    """SQLite store; applies pending migrations when a directory is given."""
    if migrations_dir is not None:
        SQLiteMigrator(db_path, migrations_dir).run_migrations()
    return Store(
        backend="sqlite",
        templates=SQLiteTemplateRepo(db_path),
        requests=SQLiteRequestRepo(db_path),
        logs=SQLiteMaintenanceLogRepo(db_path),
        emails=SQLiteEmailQueueRepo(db_path),
        users=SQLiteUserRepo(db_path),
    )


def create_store(settings: Settings, migrate: bool = True) -> Store:
    """Build the store selected by TECHMAINTAIN_BACKEND."""
    if settings.backend == "memory":
        logger.info("Using in-memory store")
        return create_memory_store()
    if settings.backend != "sqlite":
        raise ValueError(f"Unknown store backend: {settings.backend}")

    settings.data_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Using SQLite store at %s", settings.db_path)
    return create_sqlite_store(
        settings.db_path,
        str(settings.migrations_dir) if migrate else None,
    )
