"""Listing the Who's On First SQLite distributions."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import TypeAdapter

from wofbot.adapters.http_resilience import ResilientClient
from wofbot.config.whosonfirst import WhosOnFirstConfig

from .schema import InventoryFile

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from pathlib import Path

    from wofbot.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

_INVENTORY_ADAPTER = TypeAdapter(list[InventoryFile])


def latest_per_repo(files: Iterable[InventoryFile]) -> list[InventoryFile]:
    """Keep only the most recently modified file for each repo."""

    latest: dict[str, InventoryFile] = {}
    for item in files:
        existing = latest.get(item.repo)
        if existing is None or existing.last_modified < item.last_modified:
            latest[item.repo] = item
    return list(latest.values())


async def fetch_inventory(client: ResilientClient, url: str) -> list[InventoryFile]:
    response = await client.get(url)
    response.raise_for_status()
    return _INVENTORY_ADAPTER.validate_python(response.json())


def list_files(
    config: WhosOnFirstConfig | None = None,
    *,
    client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
) -> list[InventoryFile]:
    """Return the latest distribution file per repo."""

    active_config = config or WhosOnFirstConfig()
    factory = client_factory or ResilientClient

    async def run() -> list[InventoryFile]:
        async with factory(active_config.resilience) as client:
            return await fetch_inventory(client, active_config.inventory_url)

    files = latest_per_repo(asyncio.run(run()))
    log.info("Inventory lists %s repos", len(files))
    return files


def locate_local_datasets(files: Iterable[InventoryFile], downloads_dir: Path) -> list[Path]:
    """Return the decompressed databases already present in ``downloads_dir``."""

    found: list[Path] = []
    for item in files:
        path = downloads_dir / item.name
        if path.exists():
            found.append(path)
        else:
            log.warning("Dataset %s not present in %s, skipping", item.name, downloads_dir)
    return found
