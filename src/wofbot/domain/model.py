"""Domain types for gazetteer-to-Wikidata reconciliation."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping

type EntityId = str
type ForeignId = str
type LocalId = int


class ForeignSource(StrEnum):
    """Concordance namespaces a gazetteer record can point at.

    The value is the ``other_source`` label used by the gazetteer's concordance
    table.
    """

    WIKIDATA = "wd:id"
    GEONAMES = "gn:id"
    GETTY_TGN = "tgn:id"

    @property
    def is_direct(self) -> bool:
        """Whether the foreign id already is a Wikidata entity id."""
        return self is ForeignSource.WIKIDATA

    @property
    def secondary_property(self) -> str | None:
        """Wikidata property holding this namespace's identifiers."""
        return _SECONDARY_PROPERTIES.get(self)


_SECONDARY_PROPERTIES: dict[ForeignSource, str] = {
    ForeignSource.GEONAMES: "P1566",
    ForeignSource.GETTY_TGN: "P1667",
}


@dataclass(frozen=True, slots=True)
class CorrespondenceRecord:
    """One gazetteer record cross-referencing a foreign identifier."""

    local_id: LocalId
    foreign_id: ForeignId
    foreign_source: ForeignSource
    local_place_type: str | None = None

    def __post_init__(self) -> None:
        # concordance values arrive as int or str depending on the namespace
        foreign_id = str(self.foreign_id).strip()
        if not self.foreign_source.is_direct and foreign_id.isdecimal():
            # the negative cache stores numeric ids as integers
            foreign_id = str(int(foreign_id))
        object.__setattr__(self, "foreign_id", foreign_id)


@dataclass(frozen=True, slots=True)
class LinkRecord:
    """Durable record that ``entity_id`` carries a back-reference to ``local_id``."""

    entity_id: EntityId
    local_id: LocalId


class Outcome(StrEnum):
    EDITED = "edited"
    ALREADY_CLAIMED = "already-claimed"
    ALREADY_EDITED = "already-edited"
    NOT_FOUND = "not-found"
    TYPE_CONFLICT = "type-conflict"
    WRITE_FAILED = "write-failed"
    SKIPPED_DRY_RUN = "skipped-dry-run"
    ERROR = "error"


@dataclass(slots=True)
class ReconciliationResult:
    """Outcome of a reconciliation run."""

    candidates: int = 0
    outcomes: Counter[Outcome] = field(default_factory=Counter["Outcome"])

    def record(self, outcome: Outcome) -> None:
        self.outcomes[outcome] += 1

    @property
    def edits(self) -> int:
        return self.outcomes[Outcome.EDITED]

    @property
    def processed(self) -> int:
        return sum(self.outcomes.values())

    def summary(self) -> str:
        parts = [f"candidates={self.candidates}"]
        parts.extend(f"{outcome}={count}" for outcome, count in sorted(self.outcomes.items()))
        return ", ".join(parts)


@dataclass(frozen=True, slots=True)
class PlaceTypeAcceptanceIndex:
    """Snapshot of acceptable Wikidata classes per gazetteer place type."""

    classes_by_place_type: Mapping[str, frozenset[EntityId]]

    def acceptable(self, place_type: str) -> frozenset[EntityId] | None:
        return self.classes_by_place_type.get(place_type)

    def conflicts(self, place_type: str | None, classes: Iterable[EntityId]) -> set[EntityId]:
        """Return the classes in ``classes`` that are not acceptable for ``place_type``.

        Place types without an entry in the index accept everything, as do
        entities without any type claims.
        """

        if place_type is None:
            return set()
        allowed = self.acceptable(place_type)
        if allowed is None:
            return set()
        return {value for value in classes if value not in allowed}


class _AppendOnlySet[T]:
    """Set that can only grow."""

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[T] = ()) -> None:
        self._items: set[T] = set(items)

    def add(self, item: T) -> None:
        self._items.add(item)

    def update(self, items: Iterable[T]) -> None:
        self._items.update(items)

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(size={len(self._items)})"


class DedupUniverse(_AppendOnlySet[EntityId]):
    """Entities already known to carry the back-reference."""


class NegativeCache(_AppendOnlySet[ForeignId]):
    """Foreign ids confirmed to have no corresponding entity."""
