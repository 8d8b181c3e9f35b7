"""Public interface for the Wikibase adapter."""

from __future__ import annotations

from .claims import WikibaseClaimWriter
from .client import AuthenticationError, WikibaseAPIError, WikibaseClient, identifier_query
from .schema import ApiResult, ErrorEnvelope, Ok
from .session import Session, SessionManager
from .sparql import DEFAULT_PLACE_TYPE_ROOTS, build_acceptance_index
from .transport import API_DEFAULT_PARAMS, WikibaseTransport, decode_response

__all__ = [
    "API_DEFAULT_PARAMS",
    "DEFAULT_PLACE_TYPE_ROOTS",
    "ApiResult",
    "AuthenticationError",
    "ErrorEnvelope",
    "Ok",
    "Session",
    "SessionManager",
    "WikibaseAPIError",
    "WikibaseClaimWriter",
    "WikibaseClient",
    "WikibaseTransport",
    "build_acceptance_index",
    "decode_response",
    "identifier_query",
]
