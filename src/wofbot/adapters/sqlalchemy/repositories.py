"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert

from wofbot.adapters.sqlalchemy.mappings import link_table, negative_table

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from wofbot.domain.model import EntityId, ForeignId, LinkRecord, LocalId
    from wofbot.domain.ports import LinkRepository, NegativeCacheRepository

log = getLogger(__name__)


class SqlAlchemyLinkRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, link: LinkRecord) -> None:
        stmt = (
            insert(link_table)
            .values(wd=link.entity_id, wof=link.local_id)
            .on_conflict_do_nothing()
        )
        self.session.execute(stmt)

    def entity_ids(self) -> set[EntityId]:
        return {str(value) for value in self.session.execute(select(link_table.c.wd)).scalars()}

    def local_ids(self) -> set[LocalId]:
        return {int(value) for value in self.session.execute(select(link_table.c.wof)).scalars()}


class SqlAlchemyNegativeCacheRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, foreign_id: ForeignId) -> None:
        if not foreign_id.isdigit():
            log.warning("Not caching non-numeric foreign id %r", foreign_id)
            return
        stmt = insert(negative_table).values(id=int(foreign_id)).on_conflict_do_nothing()
        self.session.execute(stmt)

    def foreign_ids(self) -> set[ForeignId]:
        return {str(value) for value in self.session.execute(select(negative_table.c.id)).scalars()}


if TYPE_CHECKING:
    _links_check: LinkRepository = SqlAlchemyLinkRepository(None)  # type: ignore[arg-type]
    _negatives_check: NegativeCacheRepository = SqlAlchemyNegativeCacheRepository(None)  # type: ignore[arg-type]
