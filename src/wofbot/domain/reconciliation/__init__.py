"""Reconciliation of gazetteer records against Wikidata."""

from __future__ import annotations

from .candidates import build_candidates, deduplicate_by_local_id
from .driver import ReconciliationDriver
from .resolve import CandidateResolver, Resolution
from .universe import (
    build_dedup_universe,
    load_edited_set,
    load_link_records,
    load_linked_local_ids,
    load_negative_cache,
)

__all__ = [
    "CandidateResolver",
    "ReconciliationDriver",
    "Resolution",
    "build_candidates",
    "build_dedup_universe",
    "deduplicate_by_local_id",
    "load_edited_set",
    "load_link_records",
    "load_linked_local_ids",
    "load_negative_cache",
]
