"""Ports for the local reconciliation store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from wofbot.domain.model import EntityId, ForeignId, LinkRecord, LocalId


@runtime_checkable
class LinkRepository(Protocol):
    """Append-only store of (entity, local id) links."""

    def add(self, link: LinkRecord) -> None: ...

    def entity_ids(self) -> set[EntityId]: ...

    def local_ids(self) -> set[LocalId]: ...


@runtime_checkable
class NegativeCacheRepository(Protocol):
    """Append-only store of foreign ids known to have no entity."""

    def add(self, foreign_id: ForeignId) -> None: ...

    def foreign_ids(self) -> set[ForeignId]: ...
