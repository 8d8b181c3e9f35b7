"""Reconciliation driver linking gazetteer records to Wikidata entities.

The driver builds the dedup universe from the agent's contribution history and the
local link store, folds the dataset into a candidate list, and then processes
candidates strictly one at a time. Every link and every negative lookup is
committed before the next candidate starts, so an interrupted run resumes without
repeating completed work.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from wofbot.domain.model import LinkRecord, Outcome, ReconciliationResult
from wofbot.domain.ports import EntityNotFoundError

from .candidates import build_candidates
from .resolve import CandidateResolver
from .universe import (
    build_dedup_universe,
    load_edited_set,
    load_link_records,
    load_linked_local_ids,
    load_negative_cache,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from wofbot.domain.model import (
        CorrespondenceRecord,
        DedupUniverse,
        EntityId,
        NegativeCache,
        PlaceTypeAcceptanceIndex,
    )
    from wofbot.domain.ports import (
        AuthenticatedSession,
        ClaimWriter,
        ContributionHistory,
        EntityLookup,
        ReconciliationUnitOfWork,
    )

log = getLogger(__name__)


@dataclass(slots=True)
class ReconciliationDriver:
    """Sequential reconciliation loop over one dataset."""

    lookup: EntityLookup
    writer: ClaimWriter
    history: ContributionHistory
    unit_of_work_factory: Callable[[], ReconciliationUnitOfWork]
    target_property: str
    username: str
    session: AuthenticatedSession | None = None
    acceptance_index: PlaceTypeAcceptanceIndex | None = None
    dry_run: bool = False
    _attempted: set[EntityId] = field(default_factory=set["EntityId"], init=False)

    async def run(
        self,
        records: Iterable[CorrespondenceRecord],
        *,
        limit: int | None = None,
    ) -> ReconciliationResult:
        if self.session is None and not self.dry_run:
            raise ValueError("A session is required unless running dry")

        edited = await load_edited_set(self.history, self.username)
        with self.unit_of_work_factory() as uow:
            negative_cache = load_negative_cache(uow)
            linked = load_link_records(uow)
            linked_local_ids = load_linked_local_ids(uow)
        universe = build_dedup_universe(edited, linked)
        log.info(
            "Dedup universe holds %s entities, negative cache holds %s ids",
            len(universe),
            len(negative_cache),
        )

        candidates = build_candidates(
            records,
            negative_cache=negative_cache,
            universe=universe,
            linked_local_ids=linked_local_ids,
        )
        if limit is not None:
            candidates = candidates[:limit]

        resolver = CandidateResolver(
            lookup=self.lookup,
            universe=universe,
            negative_cache=negative_cache,
            target_property=self.target_property,
            acceptance_index=self.acceptance_index,
        )

        result = ReconciliationResult(candidates=len(candidates))
        for record in candidates:
            try:
                outcome = await self._process(record, resolver, universe, negative_cache)
            except Exception:  # noqa: BLE001
                log.exception(
                    "Unexpected error for wof:%s (%s %s)",
                    record.local_id,
                    record.foreign_source,
                    record.foreign_id,
                )
                outcome = Outcome.ERROR
            result.record(outcome)

        log.info("Reconciliation finished: %s", result.summary())
        return result

    async def _process(
        self,
        record: CorrespondenceRecord,
        resolver: CandidateResolver,
        universe: DedupUniverse,
        negative_cache: NegativeCache,
    ) -> Outcome:
        resolution = await resolver.resolve(record)
        entity_id = resolution.entity_id

        if resolution.outcome is Outcome.NOT_FOUND:
            log.info(
                "Skipping wof:%s, no entity for %s %s (%s)",
                record.local_id,
                record.foreign_source,
                record.foreign_id,
                resolution.detail or "missing",
            )
            if not record.foreign_source.is_direct and record.foreign_id not in negative_cache:
                self._persist_negative(record.foreign_id)
                negative_cache.add(record.foreign_id)
            return Outcome.NOT_FOUND
        if resolution.outcome is Outcome.ALREADY_EDITED:
            log.info("Skipping %s for wof:%s, already edited", entity_id, record.local_id)
            return Outcome.ALREADY_EDITED
        if resolution.outcome is Outcome.TYPE_CONFLICT:
            log.info(
                "Skipping %s for wof:%s, types %s conflict with placetype %s",
                entity_id,
                record.local_id,
                resolution.detail,
                record.local_place_type,
            )
            return Outcome.TYPE_CONFLICT
        if entity_id is None:
            raise RuntimeError(f"Accepted resolution without entity for wof:{record.local_id}")

        if entity_id in self._attempted:
            log.info("Skipping %s for wof:%s, already edited this run", entity_id, record.local_id)
            return Outcome.ALREADY_EDITED

        try:
            claimed = await self.writer.has_claim(entity_id, self.target_property)
        except EntityNotFoundError:
            log.info("Skipping wof:%s, entity %s does not exist", record.local_id, entity_id)
            return Outcome.NOT_FOUND
        if claimed:
            log.info("Skipping %s, already has %s", entity_id, self.target_property)
            self._persist_link(LinkRecord(entity_id=entity_id, local_id=record.local_id))
            universe.add(entity_id)
            return Outcome.ALREADY_CLAIMED

        if self.dry_run or self.session is None:
            log.info("Dry run, would edit %s with wof:%s", entity_id, record.local_id)
            return Outcome.SKIPPED_DRY_RUN

        log.info("Editing %s start", entity_id)
        self._attempted.add(entity_id)
        write = await self.writer.create_claim(
            entity_id,
            self.target_property,
            str(record.local_id),
            session=self.session,
        )
        log.info("Editing %s end", entity_id)

        if not write.success:
            log.warning("Edit of %s failed: %s", entity_id, write.error)
            return Outcome.WRITE_FAILED

        self._persist_link(LinkRecord(entity_id=entity_id, local_id=record.local_id))
        universe.add(entity_id)
        return Outcome.EDITED

    def _persist_link(self, link: LinkRecord) -> None:
        if self.dry_run:
            log.debug("Dry run, not storing link %s -> wof:%s", link.entity_id, link.local_id)
            return
        with self.unit_of_work_factory() as uow:
            uow.repositories.links.add(link)
            uow.commit()

    def _persist_negative(self, foreign_id: str) -> None:
        if self.dry_run:
            log.debug("Dry run, not storing negative lookup %s", foreign_id)
            return
        with self.unit_of_work_factory() as uow:
            uow.repositories.negatives.add(foreign_id)
            uow.commit()
