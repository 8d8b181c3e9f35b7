"""SQLAlchemy adapter package for wofbot."""

from __future__ import annotations

from .mappings import create_all_tables, link_table, metadata, negative_table
from .repositories import SqlAlchemyLinkRepository, SqlAlchemyNegativeCacheRepository
from .unit_of_work import (
    SqlAlchemyReconciliationUnitOfWork,
    StartupError,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyLinkRepository",
    "SqlAlchemyNegativeCacheRepository",
    "SqlAlchemyReconciliationUnitOfWork",
    "StartupError",
    "create_all_tables",
    "is_started",
    "link_table",
    "metadata",
    "negative_table",
    "shutdown",
    "startup",
]
