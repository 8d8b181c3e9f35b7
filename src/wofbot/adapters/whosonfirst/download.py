"""Keeping local copies of the Who's On First SQLite distributions current.

A compressed file is fetched again only when its sha256 differs from the one the
inventory advertises. Fetched files are verified before they replace the local
copy and are then decompressed next to it, keeping the ``.bz2`` for the next
comparison.
"""

from __future__ import annotations

import asyncio
import bz2
import hashlib
import shutil
from logging import getLogger
from typing import TYPE_CHECKING

from wofbot.adapters.http_resilience import ResilientClient
from wofbot.config.whosonfirst import WhosOnFirstConfig

from .concordances import DatasetError
from .inventory import fetch_inventory, latest_per_repo

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from pathlib import Path

    from wofbot.config.http_resilience import ResilienceConfig

    from .schema import InventoryFile

log = getLogger(__name__)

CHUNK_SIZE = 1024 * 1024
PARTIAL_SUFFIX = ".part"


class ChecksumMismatchError(DatasetError):
    """Raised when a downloaded file does not match the advertised sha256."""


def file_sha256(path: Path) -> str | None:
    if not path.exists():
        return None
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        while chunk := handle.read(CHUNK_SIZE):
            digest.update(chunk)
    return digest.hexdigest()


def needs_download(item: InventoryFile, downloads_dir: Path) -> bool:
    """Whether the local compressed copy is missing or differs from the inventory."""

    local_hash = file_sha256(downloads_dir / item.name_compressed)
    if local_hash is None:
        return True
    if item.checksum is None:
        # nothing to compare against; keep what we have
        return False
    return local_hash != item.checksum.lower()


def decompress(source: Path, target: Path) -> Path:
    partial = target.with_name(target.name + PARTIAL_SUFFIX)
    with bz2.open(source, "rb") as compressed, partial.open("wb") as output:
        shutil.copyfileobj(compressed, output, CHUNK_SIZE)
    partial.replace(target)
    return target


async def download_file(
    client: ResilientClient,
    url: str,
    target: Path,
    *,
    checksum: str | None = None,
) -> Path:
    """Stream ``url`` into ``target``, verifying ``checksum`` when given."""

    partial = target.with_name(target.name + PARTIAL_SUFFIX)
    digest = hashlib.sha256()
    async with client.stream("GET", url) as response:
        response.raise_for_status()
        with partial.open("wb") as output:
            async for chunk in response.aiter_bytes(chunk_size=CHUNK_SIZE):
                output.write(chunk)
                digest.update(chunk)

    if checksum is not None and digest.hexdigest() != checksum.lower():
        partial.unlink()
        raise ChecksumMismatchError(
            f"{url} has sha256 {digest.hexdigest()}, inventory lists {checksum}"
        )
    partial.replace(target)
    return target


async def sync_distribution(
    client: ResilientClient,
    config: WhosOnFirstConfig,
    item: InventoryFile,
    downloads_dir: Path,
) -> Path:
    """Bring one distribution up to date and return its decompressed path."""

    compressed = downloads_dir / item.name_compressed
    database = downloads_dir / item.name

    log.info("Checking Hash %s start", item.name_compressed)
    stale = await asyncio.to_thread(needs_download, item, downloads_dir)
    log.info("Checking Hash %s end", item.name_compressed)

    if stale:
        log.info("Download %s start", item.name_compressed)
        await download_file(
            client,
            config.file_url(item.name_compressed),
            compressed,
            checksum=item.checksum,
        )
        log.info("Download %s end", item.name_compressed)

    if stale or not database.exists():
        log.info("Decompressing %s start", item.name_compressed)
        await asyncio.to_thread(decompress, compressed, database)
        log.info("Decompressing %s end", item.name_compressed)

    return database


async def sync_distributions(
    client: ResilientClient,
    config: WhosOnFirstConfig,
    files: Iterable[InventoryFile],
    downloads_dir: Path,
) -> list[Path]:
    downloads_dir.mkdir(parents=True, exist_ok=True)
    return [await sync_distribution(client, config, item, downloads_dir) for item in files]


def download_datasets(
    downloads_dir: Path,
    config: WhosOnFirstConfig | None = None,
    *,
    client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
) -> list[Path]:
    """Fetch the latest distribution per repo into ``downloads_dir``."""

    active_config = config or WhosOnFirstConfig()
    factory = client_factory or ResilientClient

    async def run() -> list[Path]:
        async with factory(active_config.resilience) as client:
            files = latest_per_repo(await fetch_inventory(client, active_config.inventory_url))
            log.info("Inventory lists %s repos", len(files))
            return await sync_distributions(client, active_config, files, downloads_dir)

    return asyncio.run(run())
