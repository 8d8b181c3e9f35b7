"""Pydantic models for the Who's On First distribution inventory."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field


class InventoryFile(BaseModel):
    """One downloadable SQLite distribution."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    name: str
    name_compressed: str
    checksum: str | None = Field(default=None, alias="sha256_compressed")
    repo: str
    last_modified: datetime
