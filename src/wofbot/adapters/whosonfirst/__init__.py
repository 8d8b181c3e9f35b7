"""Public interface for the Who's On First dataset adapter."""

from __future__ import annotations

from .concordances import DatasetError, load_correspondences, query_correspondences
from .download import (
    ChecksumMismatchError,
    download_datasets,
    download_file,
    needs_download,
    sync_distributions,
)
from .inventory import fetch_inventory, latest_per_repo, list_files, locate_local_datasets
from .schema import InventoryFile

__all__ = [
    "ChecksumMismatchError",
    "DatasetError",
    "InventoryFile",
    "download_datasets",
    "download_file",
    "fetch_inventory",
    "latest_per_repo",
    "list_files",
    "load_correspondences",
    "locate_local_datasets",
    "needs_download",
    "query_correspondences",
    "sync_distributions",
]
