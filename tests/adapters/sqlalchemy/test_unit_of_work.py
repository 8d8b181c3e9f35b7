from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine, inspect

from wofbot.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyReconciliationUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)
from wofbot.domain.model import LinkRecord

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_unit_of_work_requires_startup() -> None:
    assert not is_started()
    with pytest.raises(StartupError):
        SqlAlchemyReconciliationUnitOfWork()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:", future=True)
    engine_b = create_engine("sqlite+pysqlite:///:memory:", future=True)

    startup(engine=engine_a, force=True)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert configured_engine() is engine_b


def test_startup_creates_schema(tmp_path: Path) -> None:
    database = tmp_path / "wofbot.db"

    startup(database_uri=f"sqlite+pysqlite:///{database}")

    engine = configured_engine()
    assert engine is not None
    assert set(inspect(engine).get_table_names()) == {"map", "negative"}


def test_unit_of_work_persists_after_commit(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with SqlAlchemyReconciliationUnitOfWork() as uow:
        uow.repositories.links.add(LinkRecord(entity_id="Q84", local_id=101750367))
        uow.repositories.negatives.add("2643743")
        uow.commit()

    with SqlAlchemyReconciliationUnitOfWork() as uow:
        assert uow.repositories.links.entity_ids() == {"Q84"}
        assert uow.repositories.negatives.foreign_ids() == {"2643743"}


def test_unit_of_work_rolls_back_on_error(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with pytest.raises(RuntimeError), SqlAlchemyReconciliationUnitOfWork() as uow:
        uow.repositories.links.add(LinkRecord(entity_id="Q84", local_id=101750367))
        raise RuntimeError("boom")

    with SqlAlchemyReconciliationUnitOfWork() as uow:
        assert uow.repositories.links.entity_ids() == set()


def test_repositories_require_entered_unit_of_work(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    uow = SqlAlchemyReconciliationUnitOfWork()

    with pytest.raises(StartupError):
        _ = uow.repositories
