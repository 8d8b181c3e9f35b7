"""Who's On First distribution configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .http_resilience import CacheConfig, ResilienceConfig

WHOSONFIRST_DIST_URL = "https://dist.whosonfirst.org/sqlite/"
INVENTORY_FILENAME = "inventory.json"


@dataclass(frozen=True, slots=True)
class WhosOnFirstConfig:
    dist_url: str = WHOSONFIRST_DIST_URL
    resilience: ResilienceConfig = field(
        default_factory=lambda: ResilienceConfig(
            name="whosonfirst",
            base_url=WHOSONFIRST_DIST_URL,
            timeout_seconds=60.0,
            cache=CacheConfig(enabled=False),
        )
    )

    @property
    def inventory_url(self) -> str:
        return f"{self.dist_url.rstrip('/')}/{INVENTORY_FILENAME}"

    def file_url(self, name: str) -> str:
        return f"{self.dist_url.rstrip('/')}/{name}"


def get_whosonfirst_config() -> WhosOnFirstConfig:
    dist_url = os.getenv("WHOSONFIRST_DIST_URL")
    if not dist_url:
        return WhosOnFirstConfig()
    return WhosOnFirstConfig(
        dist_url=dist_url,
        resilience=ResilienceConfig(
            name="whosonfirst",
            base_url=dist_url,
            timeout_seconds=60.0,
            cache=CacheConfig(enabled=False),
        ),
    )
