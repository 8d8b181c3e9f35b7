"""Build the place-type acceptance index from the Wikidata query service."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from wofbot.domain.model import PlaceTypeAcceptanceIndex

from .client import expect_ok

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from .transport import WikibaseTransport

log = getLogger(__name__)

ENTITY_URI_PREFIX = "http://www.wikidata.org/entity/"

# Root classes per Who's On First placetype; every transitive subclass is accepted.
DEFAULT_PLACE_TYPE_ROOTS: dict[str, tuple[str, ...]] = {
    "continent": ("Q5107",),
    "country": ("Q6256", "Q3624078"),
    "dependency": ("Q161243",),
    "macroregion": ("Q56061",),
    "region": ("Q10864048", "Q56061"),
    "macrocounty": ("Q56061",),
    "county": ("Q13220204", "Q56061"),
    "localadmin": ("Q15284", "Q56061"),
    "locality": ("Q486972", "Q15284"),
    "borough": ("Q56061", "Q486972"),
    "macrohood": ("Q123705",),
    "neighbourhood": ("Q123705",),
    "microhood": ("Q123705",),
    "ocean": ("Q9430",),
}


class _Binding(BaseModel):
    model_config = ConfigDict(extra="ignore")

    value: str


class _Row(BaseModel):
    model_config = ConfigDict(extra="ignore")

    cls: _Binding = Field(alias="class")


class _Results(BaseModel):
    bindings: list[_Row] = Field(default_factory=list)


class SparqlResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    results: _Results


def subclass_query(roots: Iterable[str]) -> str:
    values = " ".join(f"wd:{root}" for root in roots)
    return f"SELECT DISTINCT ?class WHERE {{ VALUES ?root {{ {values} }} ?class wdt:P279* ?root . }}"


async def fetch_subclasses(transport: WikibaseTransport, roots: Iterable[str]) -> frozenset[str]:
    result = await transport.get({"query": subclass_query(roots), "format": "json"})
    response = SparqlResponse.model_validate(expect_ok(result, "sparql"))
    return frozenset(
        row.cls.value.removeprefix(ENTITY_URI_PREFIX)
        for row in response.results.bindings
        if row.cls.value.startswith(ENTITY_URI_PREFIX)
    )


async def build_acceptance_index(
    transport: WikibaseTransport,
    roots: Mapping[str, Iterable[str]] | None = None,
) -> PlaceTypeAcceptanceIndex:
    """Query the transitive subclasses of each place type's root classes."""

    classes_by_place_type: dict[str, frozenset[str]] = {}
    for place_type, root_ids in (roots or DEFAULT_PLACE_TYPE_ROOTS).items():
        classes = await fetch_subclasses(transport, tuple(root_ids))
        log.info("Place type %s accepts %s classes", place_type, len(classes))
        classes_by_place_type[place_type] = classes
    return PlaceTypeAcceptanceIndex(classes_by_place_type)
