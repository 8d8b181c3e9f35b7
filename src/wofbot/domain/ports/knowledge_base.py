"""Ports for the remote knowledge base."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from wofbot.domain.model import EntityId


class KnowledgeBaseError(RuntimeError):
    """Raised when the knowledge base answers with an unexpected error."""


class EntityNotFoundError(KnowledgeBaseError):
    """Raised when a looked-up entity does not exist."""

    def __init__(self, entity_id: str) -> None:
        super().__init__(f"No such entity: {entity_id}")
        self.entity_id = entity_id


@dataclass(frozen=True, slots=True)
class WriteResult:
    """Result of a claim write, interpreted only for logging."""

    entity_id: EntityId
    success: bool
    claim_id: str | None = None
    revision_id: int | None = None
    error: str | None = None


@runtime_checkable
class AuthenticatedSession(Protocol):
    """An established login that write calls are made under."""

    @property
    def username(self) -> str: ...


@runtime_checkable
class EntityLookup(Protocol):
    """Read access used to resolve and validate candidate entities."""

    async def find_by_identifier(
        self,
        property_id: str,
        value: str,
        *,
        excluding: str | None = None,
    ) -> EntityId | None: ...

    async def claim_values(self, entity_id: EntityId, property_id: str) -> tuple[str, ...] | None:
        """Return the values of ``property_id`` claims, or ``None`` if the claims map is absent."""
        ...


@runtime_checkable
class ContributionHistory(Protocol):
    """Enumerates entities the agent has already edited."""

    def iter_contributions(self, username: str) -> AsyncIterator[EntityId]: ...


@runtime_checkable
class ClaimWriter(Protocol):
    """Checks for and creates claims on entities."""

    async def has_claim(self, entity_id: EntityId, property_id: str) -> bool: ...

    async def create_claim(
        self,
        entity_id: EntityId,
        property_id: str,
        value: str,
        *,
        session: AuthenticatedSession,
    ) -> WriteResult: ...
