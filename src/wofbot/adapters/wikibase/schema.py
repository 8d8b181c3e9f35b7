"""Pydantic models describing the Wikibase action API payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

THROTTLE_MESSAGES = frozenset({"actionthrottledtext"})
THROTTLE_CODES = frozenset({"actionthrottledtext", "ratelimited", "maxlag"})
PERMISSION_MESSAGES = frozenset({"permissiondenied"})
PERMISSION_CODES = frozenset({"permissiondenied", "protectedpage", "blocked"})
NO_SUCH_ENTITY_CODES = frozenset({"no-such-entity"})


class WikibaseBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# Result variants ---------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Ok:
    """A decoded payload without an error envelope."""

    payload: dict[str, Any]


@dataclass(frozen=True, slots=True)
class ErrorEnvelope:
    """A decoded ``{"error": {...}}`` payload (or an undecodable error response)."""

    code: str | None = None
    info: str | None = None
    messages: tuple[str, ...] = field(default_factory=tuple)
    status_code: int | None = None

    @property
    def is_throttled(self) -> bool:
        return bool(THROTTLE_MESSAGES.intersection(self.messages)) or self.code in THROTTLE_CODES

    @property
    def is_permission_denied(self) -> bool:
        return (
            bool(PERMISSION_MESSAGES.intersection(self.messages)) or self.code in PERMISSION_CODES
        )

    @property
    def is_no_such_entity(self) -> bool:
        return self.code in NO_SUCH_ENTITY_CODES

    def describe(self) -> str:
        names = ", ".join(self.messages) if self.messages else "-"
        return f"code={self.code} messages={names} info={self.info}"


type ApiResult = Ok | ErrorEnvelope


class ErrorMessage(WikibaseBaseModel):
    name: str
    parameters: list[Any] = Field(default_factory=list)


class ErrorDetail(WikibaseBaseModel):
    code: str | None = None
    info: str | None = None
    messages: list[ErrorMessage] = Field(default_factory=list)


class ErrorPayload(WikibaseBaseModel):
    error: ErrorDetail

    def to_envelope(self, *, status_code: int | None = None) -> ErrorEnvelope:
        return ErrorEnvelope(
            code=self.error.code,
            info=self.error.info,
            messages=tuple(message.name for message in self.error.messages),
            status_code=status_code,
        )


# Tokens and login --------------------------------------------------------------


class Tokens(WikibaseBaseModel):
    logintoken: str | None = None
    csrftoken: str | None = None


class TokensQuery(WikibaseBaseModel):
    tokens: Tokens


class TokensResponse(WikibaseBaseModel):
    query: TokensQuery


class LoginResult(WikibaseBaseModel):
    result: str
    reason: str | None = None
    lgusername: str | None = None


class LoginResponse(WikibaseBaseModel):
    login: LoginResult


# Contributions -----------------------------------------------------------------


class Contribution(WikibaseBaseModel):
    title: str


class ContributionsQuery(WikibaseBaseModel):
    usercontribs: list[Contribution] = Field(default_factory=list)


class ContributionsContinue(WikibaseBaseModel):
    uccontinue: str | None = None
    continue_: str | None = Field(default=None, alias="continue")


class ContributionsResponse(WikibaseBaseModel):
    query: ContributionsQuery | None = None
    continuation: ContributionsContinue | None = Field(default=None, alias="continue")

    @property
    def titles(self) -> list[str]:
        if self.query is None:
            return []
        return [item.title for item in self.query.usercontribs]

    @property
    def next_cursor(self) -> str | None:
        if self.continuation is None:
            return None
        return self.continuation.uccontinue

    @property
    def next_params(self) -> dict[str, str]:
        """Query parameters for the next page; empty when the listing is complete."""

        cursor = self.next_cursor
        if cursor is None or self.continuation is None:
            return {}
        params = {"uccontinue": cursor}
        if self.continuation.continue_:
            params["continue"] = self.continuation.continue_
        return params


# Search ------------------------------------------------------------------------


class SearchHit(WikibaseBaseModel):
    title: str


class SearchQuery(WikibaseBaseModel):
    search: list[SearchHit] = Field(default_factory=list)


class SearchResponse(WikibaseBaseModel):
    query: SearchQuery | None = None

    @property
    def titles(self) -> list[str]:
        if self.query is None:
            return []
        return [hit.title for hit in self.query.search]


# Claims ------------------------------------------------------------------------


class DataValue(WikibaseBaseModel):
    value: Any = None
    type: str | None = None


class Snak(WikibaseBaseModel):
    snaktype: str
    property_id: str = Field(alias="property")
    datavalue: DataValue | None = None

    @property
    def value_id(self) -> str | None:
        """Return the snak value as a string (entity id for item values)."""

        if self.datavalue is None:
            return None
        value = self.datavalue.value
        if isinstance(value, dict):
            entity_id = value.get("id")
            return str(entity_id) if entity_id is not None else None
        if value is None:
            return None
        return str(value)


class Claim(WikibaseBaseModel):
    id: str | None = None
    mainsnak: Snak
    rank: str | None = None


class ClaimsResponse(WikibaseBaseModel):
    claims: dict[str, list[Claim]] | None = None

    @field_validator("claims", mode="before")
    @classmethod
    def _empty_list_to_dict(cls, value: object) -> object:
        # PHP serialises an empty claims array as []
        if isinstance(value, list) and not value:
            return {}
        return value


class CreatedClaim(WikibaseBaseModel):
    id: str


class PageInfo(WikibaseBaseModel):
    lastrevid: int | None = None


class CreateClaimResponse(WikibaseBaseModel):
    success: bool = False
    claim: CreatedClaim | None = None
    pageinfo: PageInfo | None = None
