"""Read concordances from a Who's On First SQLite distribution."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy import bindparam, create_engine, inspect, text

from wofbot.domain.model import CorrespondenceRecord, ForeignSource

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class DatasetError(RuntimeError):
    """Raised when a distribution file cannot be read."""


_WITH_PLACETYPE = text(
    "SELECT c.id, c.other_id, c.other_source, s.placetype "
    "FROM concordances AS c LEFT JOIN spr AS s ON s.id = c.id "
    "WHERE c.other_source IN :sources"
).bindparams(bindparam("sources", expanding=True))

_WITHOUT_PLACETYPE = text(
    "SELECT c.id, c.other_id, c.other_source, NULL AS placetype "
    "FROM concordances AS c "
    "WHERE c.other_source IN :sources"
).bindparams(bindparam("sources", expanding=True))


def open_dataset(path: Path) -> Engine:
    if not path.exists():
        raise DatasetError(f"Dataset {path} does not exist")
    return create_engine(f"sqlite+pysqlite:///file:{path}?mode=ro&uri=true", future=True)


def query_correspondences(
    path: Path,
    *,
    sources: Iterable[ForeignSource] = (ForeignSource.WIKIDATA,),
) -> list[CorrespondenceRecord]:
    """Return the concordances of ``path`` pointing at any of ``sources``."""

    wanted = [source.value for source in sources]
    engine = open_dataset(path)
    try:
        tables = set(inspect(engine).get_table_names())
        if "concordances" not in tables:
            raise DatasetError(f"Dataset {path} has no concordances table")
        statement = _WITH_PLACETYPE if "spr" in tables else _WITHOUT_PLACETYPE
        with engine.connect() as connection:
            rows = connection.execute(statement, {"sources": wanted}).all()
    finally:
        engine.dispose()

    records = [
        CorrespondenceRecord(
            local_id=int(row.id),
            foreign_id=str(row.other_id),
            foreign_source=ForeignSource(row.other_source),
            local_place_type=row.placetype,
        )
        for row in rows
        if row.other_id is not None and str(row.other_id).strip()
    ]
    log.info("Read %s concordances from %s", len(records), path.name)
    return records


def load_correspondences(
    paths: Iterable[Path],
    *,
    sources: Iterable[ForeignSource] = (ForeignSource.WIKIDATA,),
) -> list[CorrespondenceRecord]:
    """Concatenate the concordances of several distributions, in order."""

    wanted = tuple(sources)
    records: list[CorrespondenceRecord] = []
    for path in paths:
        records.extend(query_correspondences(path, sources=wanted))
    log.info("Number of concordance records: %s", f"{len(records):,}")
    return records
