"""Candidate list construction."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Set

    from wofbot.domain.model import (
        CorrespondenceRecord,
        DedupUniverse,
        LocalId,
        NegativeCache,
    )

log = getLogger(__name__)


def deduplicate_by_local_id(
    records: Iterable[CorrespondenceRecord],
) -> tuple[CorrespondenceRecord, ...]:
    """Fold records by ``local_id``; a later record replaces an earlier one."""

    folded: dict[LocalId, CorrespondenceRecord] = {}
    for record in records:
        folded[record.local_id] = record
    return tuple(folded.values())


def build_candidates(
    records: Iterable[CorrespondenceRecord],
    *,
    negative_cache: NegativeCache,
    universe: DedupUniverse,
    linked_local_ids: Set[LocalId] = frozenset(),
) -> tuple[CorrespondenceRecord, ...]:
    """Return the records that still need work, in dataset order.

    Search-based records whose foreign id is in the negative cache are dropped, as
    are direct records whose entity is already in the universe and any record whose
    local id already has a persisted link.
    """

    deduplicated = deduplicate_by_local_id(records)
    candidates = tuple(
        record
        for record in deduplicated
        if not _is_settled(
            record,
            negative_cache=negative_cache,
            universe=universe,
            linked_local_ids=linked_local_ids,
        )
    )
    log.info(
        "Built %s candidates from %s records (%s dropped as already settled)",
        len(candidates),
        len(deduplicated),
        len(deduplicated) - len(candidates),
    )
    return candidates


def _is_settled(
    record: CorrespondenceRecord,
    *,
    negative_cache: NegativeCache,
    universe: DedupUniverse,
    linked_local_ids: Set[LocalId],
) -> bool:
    if record.local_id in linked_local_ids:
        return True
    if record.foreign_source.is_direct:
        return record.foreign_id in universe
    return record.foreign_id in negative_cache
