"""Resolve gazetteer records to candidate Wikidata entities."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from wofbot.domain.model import Outcome
from wofbot.domain.ports import EntityNotFoundError

if TYPE_CHECKING:
    from wofbot.domain.model import (
        CorrespondenceRecord,
        DedupUniverse,
        EntityId,
        NegativeCache,
        PlaceTypeAcceptanceIndex,
    )
    from wofbot.domain.ports import EntityLookup

log = getLogger(__name__)

INSTANCE_OF = "P31"


@dataclass(frozen=True, slots=True)
class Resolution:
    """Result of resolving one record.

    ``outcome`` is ``None`` when the entity was accepted as a write candidate.
    """

    record: CorrespondenceRecord
    entity_id: EntityId | None = None
    outcome: Outcome | None = None
    detail: str | None = None

    @property
    def accepted(self) -> bool:
        return self.outcome is None and self.entity_id is not None


@dataclass(slots=True)
class CandidateResolver:
    """Locate and validate the entity a record should be linked to.

    Records from the Wikidata namespace are resolved directly. Other namespaces
    are searched by their secondary identifier property, skipping entities that
    already hold ``target_property``. Only the first search hit is used.
    """

    lookup: EntityLookup
    universe: DedupUniverse
    negative_cache: NegativeCache
    target_property: str
    acceptance_index: PlaceTypeAcceptanceIndex | None = None

    async def resolve(self, record: CorrespondenceRecord) -> Resolution:
        if record.foreign_source.is_direct:
            entity_id: EntityId | None = record.foreign_id
        else:
            if record.foreign_id in self.negative_cache:
                return Resolution(record, outcome=Outcome.NOT_FOUND, detail="negative cache")
            entity_id = await self._search(record)
            if entity_id is None:
                return Resolution(record, outcome=Outcome.NOT_FOUND, detail="no search results")

        if entity_id in self.universe:
            return Resolution(record, entity_id=entity_id, outcome=Outcome.ALREADY_EDITED)

        if self.acceptance_index is not None and record.local_place_type is not None:
            try:
                conflicts = await self._type_conflicts(record, entity_id)
            except EntityNotFoundError:
                return Resolution(record, entity_id=entity_id, outcome=Outcome.NOT_FOUND)
            if conflicts:
                return Resolution(
                    record,
                    entity_id=entity_id,
                    outcome=Outcome.TYPE_CONFLICT,
                    detail=", ".join(sorted(conflicts)),
                )

        return Resolution(record, entity_id=entity_id)

    async def _search(self, record: CorrespondenceRecord) -> EntityId | None:
        secondary = record.foreign_source.secondary_property
        if secondary is None:
            log.warning(
                "No identifier property known for %s, cannot search %s",
                record.foreign_source,
                record.foreign_id,
            )
            return None
        return await self.lookup.find_by_identifier(
            secondary,
            record.foreign_id,
            excluding=self.target_property,
        )

    async def _type_conflicts(self, record: CorrespondenceRecord, entity_id: EntityId) -> set[str]:
        if self.acceptance_index is None:
            return set()
        classes = await self.lookup.claim_values(entity_id, INSTANCE_OF)
        if not classes:
            # untyped entities are accepted
            return set()
        return self.acceptance_index.conflicts(record.local_place_type, classes)
