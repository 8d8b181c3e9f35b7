"""Table metadata for the local reconciliation store."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Column, Integer, MetaData, Table, Text

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

metadata = MetaData()

# Links already performed or discovered: Wikidata entity -> WOF id.
link_table = Table(
    "map",
    metadata,
    Column("wd", Text, primary_key=True),
    Column("wof", Integer, primary_key=True, autoincrement=False),
)

# Foreign ids with no Wikidata entity.
negative_table = Table(
    "negative",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=False),
)


def create_all_tables(engine: Engine) -> None:
    metadata.create_all(engine, checkfirst=True)
