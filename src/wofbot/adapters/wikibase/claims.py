"""Claim checks and writes."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from wofbot.domain.ports import WriteResult

from .client import WikibaseAPIError
from .schema import CreateClaimResponse, ErrorEnvelope
from .session import Session

if TYPE_CHECKING:
    from wofbot.domain.ports import AuthenticatedSession

    from .client import WikibaseClient
    from .session import SessionManager

log = getLogger(__name__)


class WikibaseClaimWriter:
    """Check for existing claims and create new ones under a session.

    A failed write is reported through :class:`WriteResult` and never raised, so a
    single failure cannot end a batch.
    """

    def __init__(self, client: WikibaseClient, sessions: SessionManager) -> None:
        self._client = client
        self._sessions = sessions

    async def has_claim(self, entity_id: str, property_id: str) -> bool:
        claims = await self._client.get_claims(entity_id, property_id)
        if claims is None:
            log.warning(
                "Entity %s returned no claims map while checking %s; treating as unclaimed",
                entity_id,
                property_id,
            )
            return False
        return bool(claims.get(property_id))

    async def create_claim(
        self,
        entity_id: str,
        property_id: str,
        value: str,
        *,
        session: AuthenticatedSession,
    ) -> WriteResult:
        if not isinstance(session, Session):
            raise TypeError(f"Expected a Wikibase session, got {type(session).__name__}")

        try:
            token = await self._sessions.fresh_write_token(session)
        except WikibaseAPIError as exc:
            log.error("Could not fetch write token for %s: %s", entity_id, exc)
            return WriteResult(entity_id=entity_id, success=False, error=str(exc))

        result = await self._client.create_claim(
            entity_id,
            property_id,
            value,
            token=token,
            cookies=session.cookies,
        )
        if isinstance(result, ErrorEnvelope):
            return WriteResult(entity_id=entity_id, success=False, error=result.describe())

        try:
            response = CreateClaimResponse.model_validate(result.payload)
        except ValidationError as exc:
            return WriteResult(entity_id=entity_id, success=False, error=str(exc))

        if not response.success:
            return WriteResult(entity_id=entity_id, success=False, error="unsuccessful response")

        return WriteResult(
            entity_id=entity_id,
            success=True,
            claim_id=response.claim.id if response.claim else None,
            revision_id=response.pageinfo.lastrevid if response.pageinfo else None,
        )
