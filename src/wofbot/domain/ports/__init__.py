"""Domain port definitions for adapters."""

from __future__ import annotations

from .knowledge_base import (
    AuthenticatedSession,
    ClaimWriter,
    ContributionHistory,
    EntityLookup,
    EntityNotFoundError,
    KnowledgeBaseError,
    WriteResult,
)
from .persistence import LinkRepository, NegativeCacheRepository
from .unit_of_work import (
    ReconciliationRepositories,
    ReconciliationUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "AuthenticatedSession",
    "ClaimWriter",
    "ContributionHistory",
    "EntityLookup",
    "EntityNotFoundError",
    "KnowledgeBaseError",
    "LinkRepository",
    "NegativeCacheRepository",
    "ReconciliationRepositories",
    "ReconciliationUnitOfWork",
    "RepositoryCollection",
    "UnitOfWork",
    "WriteResult",
]
