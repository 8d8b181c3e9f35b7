"""Loading the dedup universe and negative cache."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from wofbot.domain.model import DedupUniverse, NegativeCache

if TYPE_CHECKING:
    from collections.abc import Iterable

    from wofbot.domain.model import EntityId, LocalId
    from wofbot.domain.ports import ContributionHistory, ReconciliationUnitOfWork

log = getLogger(__name__)


async def load_edited_set(history: ContributionHistory, username: str) -> set[EntityId]:
    """Collect every entity ``username`` has contributed to."""

    edited: set[EntityId] = set()
    async for entity_id in history.iter_contributions(username):
        edited.add(entity_id)
    log.info("Loaded %s previously edited entities for %s", len(edited), username)
    return edited


def load_negative_cache(uow: ReconciliationUnitOfWork) -> NegativeCache:
    return NegativeCache(uow.repositories.negatives.foreign_ids())


def load_link_records(uow: ReconciliationUnitOfWork) -> set[EntityId]:
    return uow.repositories.links.entity_ids()


def load_linked_local_ids(uow: ReconciliationUnitOfWork) -> set[LocalId]:
    return uow.repositories.links.local_ids()


def build_dedup_universe(*sources: Iterable[EntityId]) -> DedupUniverse:
    universe = DedupUniverse()
    for source in sources:
        universe.update(source)
    return universe
