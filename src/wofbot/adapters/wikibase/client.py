"""Wikibase action API client."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING

from wofbot.domain.ports import EntityNotFoundError, KnowledgeBaseError

from .schema import (
    ClaimsResponse,
    ContributionsResponse,
    ErrorEnvelope,
    SearchResponse,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    import httpx

    from .schema import ApiResult, Claim
    from .transport import WikibaseTransport

log = getLogger(__name__)


class WikibaseAPIError(KnowledgeBaseError):
    """Raised when the Wikibase API returns an unexpected response."""

    def __init__(self, message: str, *, envelope: ErrorEnvelope | None = None) -> None:
        super().__init__(message)
        self.envelope = envelope


class AuthenticationError(WikibaseAPIError):
    """Raised when logging in fails; no edit can proceed without a session."""


def expect_ok(result: ApiResult, action: str) -> dict[str, object]:
    if isinstance(result, ErrorEnvelope):
        raise WikibaseAPIError(f"{action} failed: {result.describe()}", envelope=result)
    return result.payload


def identifier_query(property_id: str, value: str, *, excluding: str | None = None) -> str:
    """Build a CirrusSearch query for entities holding ``property_id=value``."""

    query = f"haswbstatement:{property_id}={value}"
    if excluding:
        query = f"{query} -haswbstatement:{excluding}"
    return query


class WikibaseClient:
    """Read and write calls against the Wikibase action API."""

    def __init__(self, transport: WikibaseTransport) -> None:
        self._transport = transport

    async def iter_contributions(self, username: str) -> AsyncIterator[str]:
        params: dict[str, str] = {
            "action": "query",
            "list": "usercontribs",
            "uclimit": "max",
            "ucnamespace": "0",
            "ucuser": username,
            "ucprop": "title",
        }
        continuation: dict[str, str] = {}
        page = 0
        while True:
            page += 1
            result = await self._transport.get({**params, **continuation})
            response = ContributionsResponse.model_validate(expect_ok(result, "usercontribs"))
            for title in response.titles:
                yield title
            continuation = response.next_params
            if not continuation:
                log.debug("Contribution history for %s ended after %s pages", username, page)
                return

    async def get_claims(self, entity_id: str, property_id: str) -> dict[str, list[Claim]] | None:
        result = await self._transport.get(
            {"action": "wbgetclaims", "entity": entity_id, "property": property_id}
        )
        if isinstance(result, ErrorEnvelope) and result.is_no_such_entity:
            raise EntityNotFoundError(entity_id)
        return ClaimsResponse.model_validate(expect_ok(result, "wbgetclaims")).claims

    async def claim_values(self, entity_id: str, property_id: str) -> tuple[str, ...] | None:
        claims = await self.get_claims(entity_id, property_id)
        if claims is None:
            log.warning("Entity %s returned no claims map", entity_id)
            return None
        return tuple(
            value
            for claim in claims.get(property_id, [])
            if (value := claim.mainsnak.value_id) is not None
        )

    async def search_titles(self, query: str, *, limit: int = 1) -> list[str]:
        result = await self._transport.get(
            {
                "action": "query",
                "list": "search",
                "srsearch": query,
                "srlimit": str(limit),
                "srinfo": "",
                "srprop": "",
            }
        )
        return SearchResponse.model_validate(expect_ok(result, "search")).titles

    async def find_by_identifier(
        self,
        property_id: str,
        value: str,
        *,
        excluding: str | None = None,
    ) -> str | None:
        titles = await self.search_titles(identifier_query(property_id, value, excluding=excluding))
        if not titles:
            return None
        return titles[0]

    async def create_claim(
        self,
        entity_id: str,
        property_id: str,
        value: str,
        *,
        token: str,
        cookies: httpx.Cookies,
    ) -> ApiResult:
        return await self._transport.post(
            {
                "action": "wbcreateclaim",
                "entity": entity_id,
                "snaktype": "value",
                "property": property_id,
                # string datavalues must be sent JSON-encoded
                "value": json.dumps(value),
                "token": token,
                "bot": "1",
            },
            cookies=cookies,
        )
