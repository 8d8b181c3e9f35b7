"""Configuration types for resilient HTTP clients."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from collections.abc import Mapping

ShouldCacheHook = Callable[[object], bool]

THROTTLE_WAIT_SECONDS = 60.0


@dataclass(slots=True, frozen=True)
class BackoffPolicy:
    """Wait schedule for the Wikibase transport.

    Transient failures wait ``base ** attempt`` seconds with no upper bound; a
    throttle response always waits ``throttle_wait_seconds`` and resets the attempt
    counter.
    """

    base: float = 2.0
    throttle_wait_seconds: float = THROTTLE_WAIT_SECONDS

    def transient_wait(self, attempt: int) -> float:
        return self.base**attempt


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class CacheConfig:
    enabled: bool = True
    backend: Literal["sqlite", "memory"] = "memory"
    sqlite_path: str | None = None
    default_ttl_seconds: float | None = None
    refresh_ttl_on_access: bool = True
    should_cache: ShouldCacheHook | None = None


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float | None = None
    backoff: BackoffPolicy = field(default_factory=BackoffPolicy)
    ratelimit: RateLimit | None = None
    cache: CacheConfig | None = None
    default_headers: Mapping[str, str] | None = None
