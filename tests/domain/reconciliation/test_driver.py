from __future__ import annotations

import asyncio

import pytest

from tests.helpers.fakes import FakeKnowledgeBase, FakeSession, FakeUnitOfWork, InMemoryStore
from wofbot.domain.model import (
    CorrespondenceRecord,
    ForeignSource,
    LinkRecord,
    Outcome,
    PlaceTypeAcceptanceIndex,
    ReconciliationResult,
)
from wofbot.domain.reconciliation import ReconciliationDriver

WD = ForeignSource.WIKIDATA
GN = ForeignSource.GEONAMES
TARGET = "P6766"


def _driver(
    kb: FakeKnowledgeBase,
    store: InMemoryStore,
    *,
    dry_run: bool = False,
    acceptance_index: PlaceTypeAcceptanceIndex | None = None,
) -> ReconciliationDriver:
    return ReconciliationDriver(
        lookup=kb,
        writer=kb,
        history=kb,
        unit_of_work_factory=lambda: FakeUnitOfWork(store),
        target_property=TARGET,
        username="Q23679",
        session=None if dry_run else FakeSession(),
        acceptance_index=acceptance_index,
        dry_run=dry_run,
    )


def _run(
    kb: FakeKnowledgeBase,
    store: InMemoryStore,
    records: list[CorrespondenceRecord],
    *,
    limit: int | None = None,
    dry_run: bool = False,
    acceptance_index: PlaceTypeAcceptanceIndex | None = None,
) -> ReconciliationResult:
    driver = _driver(kb, store, dry_run=dry_run, acceptance_index=acceptance_index)
    return asyncio.run(driver.run(records, limit=limit))


def test_direct_record_is_written_and_linked() -> None:
    kb = FakeKnowledgeBase()
    kb.add_entity("Q84")
    store = InMemoryStore()

    result = _run(kb, store, [CorrespondenceRecord(101750367, "Q84", WD)])

    assert result.outcomes[Outcome.EDITED] == 1
    assert kb.writes == [("Q84", TARGET, "101750367")]
    assert store.links == {LinkRecord("Q84", 101750367)}


def test_second_run_performs_no_writes() -> None:
    kb = FakeKnowledgeBase()
    kb.add_entity("Q84")
    kb.add_entity("Q90", P1566=["2988507"])
    store = InMemoryStore()
    records = [
        CorrespondenceRecord(101750367, "Q84", WD),
        CorrespondenceRecord(101751119, "2988507", GN),
        CorrespondenceRecord(404, "999999", GN),
    ]

    first = _run(kb, store, records)
    writes_after_first = list(kb.writes)
    second = _run(kb, store, records)

    assert first.edits == 2
    assert second.edits == 0
    assert second.candidates == 0
    assert kb.writes == writes_after_first


def test_later_duplicate_local_id_wins() -> None:
    kb = FakeKnowledgeBase()
    kb.add_entity("Q100")
    kb.add_entity("Q200")
    store = InMemoryStore()

    _run(
        kb,
        store,
        [CorrespondenceRecord(1, "Q100", WD), CorrespondenceRecord(1, "Q200", WD)],
    )

    assert kb.writes == [("Q200", TARGET, "1")]


def test_entity_is_written_at_most_once_per_run() -> None:
    kb = FakeKnowledgeBase()
    kb.add_entity("Q84")
    store = InMemoryStore()

    result = _run(
        kb,
        store,
        [CorrespondenceRecord(1, "Q84", WD), CorrespondenceRecord(2, "Q84", WD)],
    )

    assert len(kb.writes) == 1
    assert result.outcomes[Outcome.EDITED] == 1
    assert result.outcomes[Outcome.ALREADY_EDITED] == 1


def test_failed_write_is_not_repeated_in_the_same_run() -> None:
    kb = FakeKnowledgeBase(failing_writes={"Q84"})
    kb.add_entity("Q84")
    store = InMemoryStore()

    result = _run(
        kb,
        store,
        [CorrespondenceRecord(1, "Q84", WD), CorrespondenceRecord(2, "Q84", WD)],
    )

    assert len(kb.writes) == 1
    assert result.outcomes[Outcome.WRITE_FAILED] == 1
    assert result.outcomes[Outcome.ALREADY_EDITED] == 1
    assert store.links == set()


def test_existing_claim_is_recorded_without_writing() -> None:
    kb = FakeKnowledgeBase()
    kb.add_entity("Q84", P6766=["101750367"])
    store = InMemoryStore()

    result = _run(kb, store, [CorrespondenceRecord(101750367, "Q84", WD)])

    assert kb.writes == []
    assert result.outcomes[Outcome.ALREADY_CLAIMED] == 1
    assert store.links == {LinkRecord("Q84", 101750367)}


def test_contribution_history_prevents_writes() -> None:
    kb = FakeKnowledgeBase(contributions=["Q84"])
    kb.add_entity("Q84")
    store = InMemoryStore()

    result = _run(kb, store, [CorrespondenceRecord(1, "Q84", WD)])

    assert kb.writes == []
    assert result.candidates == 0


def test_missing_search_hit_is_negatively_cached() -> None:
    kb = FakeKnowledgeBase()
    store = InMemoryStore()
    records = [CorrespondenceRecord(1, "2643743", GN)]

    first = _run(kb, store, records)
    second = _run(kb, store, records)

    assert first.outcomes[Outcome.NOT_FOUND] == 1
    assert store.negatives == {"2643743"}
    assert kb.searches == [("P1566", "2643743")]
    assert second.candidates == 0


def test_repeated_foreign_id_is_searched_once() -> None:
    kb = FakeKnowledgeBase()
    store = InMemoryStore()

    _run(
        kb,
        store,
        [CorrespondenceRecord(1, "2643743", GN), CorrespondenceRecord(2, "2643743", GN)],
    )

    assert kb.searches == [("P1566", "2643743")]


def test_missing_direct_entity_is_not_negatively_cached() -> None:
    kb = FakeKnowledgeBase()
    store = InMemoryStore()

    result = _run(kb, store, [CorrespondenceRecord(1, "Q404", WD)])

    assert result.outcomes[Outcome.NOT_FOUND] == 1
    assert store.negatives == set()
    assert kb.writes == []


def test_type_conflict_skips_write() -> None:
    kb = FakeKnowledgeBase()
    kb.add_entity("Q84", P31=["Q6256"])
    store = InMemoryStore()
    index = PlaceTypeAcceptanceIndex({"locality": frozenset({"Q515"})})

    result = _run(
        kb,
        store,
        [CorrespondenceRecord(1, "Q84", WD, "locality")],
        acceptance_index=index,
    )

    assert result.outcomes[Outcome.TYPE_CONFLICT] == 1
    assert kb.writes == []


def test_dry_run_writes_nothing() -> None:
    kb = FakeKnowledgeBase()
    kb.add_entity("Q84")
    store = InMemoryStore()

    result = _run(kb, store, [CorrespondenceRecord(1, "Q84", WD)], dry_run=True)

    assert result.outcomes[Outcome.SKIPPED_DRY_RUN] == 1
    assert kb.writes == []
    assert store.links == set()
    assert store.negatives == set()


def test_dry_run_does_not_cache_missing_search_hits() -> None:
    kb = FakeKnowledgeBase()
    store = InMemoryStore()
    records = [CorrespondenceRecord(1, "2643743", GN), CorrespondenceRecord(2, "2643743", GN)]

    result = _run(kb, store, records, dry_run=True)

    assert result.outcomes[Outcome.NOT_FOUND] == 2
    assert kb.searches == [("P1566", "2643743")]
    assert store.negatives == set()


def test_dry_run_does_not_record_existing_claims() -> None:
    kb = FakeKnowledgeBase()
    kb.add_entity("Q84", P6766=["101750367"])
    store = InMemoryStore()

    result = _run(kb, store, [CorrespondenceRecord(101750367, "Q84", WD)], dry_run=True)

    assert result.outcomes[Outcome.ALREADY_CLAIMED] == 1
    assert kb.writes == []
    assert store.links == set()


def test_session_is_required_unless_dry_run() -> None:
    kb = FakeKnowledgeBase()
    driver = _driver(kb, InMemoryStore())
    driver.session = None

    with pytest.raises(ValueError, match="session"):
        asyncio.run(driver.run([]))


def test_unexpected_error_does_not_stop_the_batch() -> None:
    kb = FakeKnowledgeBase(exploding={"Q1"})
    kb.add_entity("Q1")
    kb.add_entity("Q2")
    store = InMemoryStore()

    result = _run(
        kb,
        store,
        [CorrespondenceRecord(1, "Q1", WD), CorrespondenceRecord(2, "Q2", WD)],
    )

    assert result.outcomes[Outcome.ERROR] == 1
    assert result.outcomes[Outcome.EDITED] == 1
    assert kb.writes == [("Q2", TARGET, "2")]


def test_limit_caps_processed_candidates() -> None:
    kb = FakeKnowledgeBase()
    for entity_id in ("Q1", "Q2", "Q3"):
        kb.add_entity(entity_id)
    store = InMemoryStore()
    records = [CorrespondenceRecord(i, f"Q{i}", WD) for i in (1, 2, 3)]

    result = _run(kb, store, records, limit=2)

    assert result.candidates == 2
    assert [write[0] for write in kb.writes] == ["Q1", "Q2"]


def test_summary_lists_outcomes() -> None:
    result = ReconciliationResult(candidates=2)
    result.record(Outcome.EDITED)
    result.record(Outcome.NOT_FOUND)

    assert result.summary() == "candidates=2, edited=1, not-found=1"
    assert result.processed == 2
