"""Wikidata configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .env import first_env_var
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig

WIKIDATA_API_URL = "https://www.wikidata.org/w/api.php"
WIKIDATA_SPARQL_URL = "https://query.wikidata.org/sparql"
DEFAULT_WIKIDATA_USERNAME = "Q23679"
DEFAULT_USER_AGENT = "wofbot (Who's On First concordance bot)"
WHOS_ON_FIRST_ID_PROPERTY = "P6766"
DEFAULT_MAXLAG_SECONDS = 5
SPARQL_CACHE_TTL_SECONDS = 24 * 60 * 60


@dataclass(frozen=True, slots=True)
class WikidataConfig:
    """Holds Wikidata API configuration values."""

    username: str
    password: str = field(repr=False)
    api_url: str = WIKIDATA_API_URL
    sparql_url: str = WIKIDATA_SPARQL_URL
    property_id: str = WHOS_ON_FIRST_ID_PROPERTY
    maxlag: int | None = DEFAULT_MAXLAG_SECONDS
    user_agent: str = DEFAULT_USER_AGENT
    resilience: ResilienceConfig = field(
        default_factory=lambda: default_api_resilience(DEFAULT_USER_AGENT)
    )
    sparql_resilience: ResilienceConfig = field(
        default_factory=lambda: default_sparql_resilience(DEFAULT_USER_AGENT)
    )


def default_api_resilience(user_agent: str, *, api_url: str = WIKIDATA_API_URL) -> ResilienceConfig:
    return ResilienceConfig(
        name="wikidata",
        base_url=api_url,
        ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
        cache=None,
        default_headers={"User-Agent": user_agent},
    )


def default_sparql_resilience(
    user_agent: str,
    *,
    sparql_url: str = WIKIDATA_SPARQL_URL,
) -> ResilienceConfig:
    return ResilienceConfig(
        name="wikidata-sparql",
        base_url=sparql_url,
        timeout_seconds=120.0,
        ratelimit=RateLimit(max_calls=1, per_seconds=1.0),
        cache=CacheConfig(
            enabled=True,
            backend="sqlite",
            default_ttl_seconds=SPARQL_CACHE_TTL_SECONDS,
            should_cache=_is_sparql_result,
        ),
        default_headers={
            "User-Agent": user_agent,
            "Accept": "application/sparql-results+json",
        },
    )


def _is_sparql_result(payload: object) -> bool:
    return isinstance(payload, dict) and "results" in payload


def get_wikidata_config(*, require_password: bool = True) -> WikidataConfig:
    """Build the Wikidata configuration from the environment.

    ``WIKIDATA_PASSWORD`` is required for editing runs; the legacy ``PASSWORD``
    variable is honoured as a fallback.
    """

    password = first_env_var("WIKIDATA_PASSWORD", "PASSWORD") if require_password else ""
    username = os.getenv("WIKIDATA_USERNAME") or DEFAULT_WIKIDATA_USERNAME
    api_url = os.getenv("WIKIDATA_API_URL") or WIKIDATA_API_URL
    sparql_url = os.getenv("WIKIDATA_SPARQL_URL") or WIKIDATA_SPARQL_URL
    user_agent = os.getenv("WIKIDATA_USER_AGENT") or DEFAULT_USER_AGENT
    return WikidataConfig(
        username=username,
        password=password,
        api_url=api_url,
        sparql_url=sparql_url,
        user_agent=user_agent,
        resilience=default_api_resilience(user_agent, api_url=api_url),
        sparql_resilience=default_sparql_resilience(user_agent, sparql_url=sparql_url),
    )
