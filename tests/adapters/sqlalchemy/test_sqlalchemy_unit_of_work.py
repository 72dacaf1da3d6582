from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine

from formsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.engine import Engine

    from formsync.adapters.sqlalchemy import EntityTypeRegistry


def test_unit_of_work_requires_startup() -> None:
    shutdown()

    assert not is_started()
    with pytest.raises(StartupError):
        SqlAlchemyUnitOfWork()


def test_startup_refuses_silent_reconfiguration(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
    sqlite_engine: Engine,
    registry: EntityTypeRegistry,
) -> None:
    _ = sqlite_unit_of_work
    assert configured_engine() is sqlite_engine

    with pytest.raises(StartupError):
        startup(registry, engine=sqlite_engine)

    other = create_engine("sqlite+pysqlite:///:memory:", future=True)
    startup(registry, engine=other, force=True)
    assert configured_engine() is other


def test_commit_persists_changes(sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork]) -> None:
    with sqlite_unit_of_work() as uow:
        record = uow.repositories.repository("Image").create({"article_id": 1})
        uow.commit()

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.repository("Image").get(record.id) is not None


def test_exception_rolls_back(sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork]) -> None:
    with pytest.raises(RuntimeError), sqlite_unit_of_work() as uow:
        uow.repositories.repository("Image").create({"article_id": 1, "caption": "lost"})
        raise RuntimeError("boom")

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.repository("Image").related({"article_id": 1}) == []


def test_repositories_unavailable_outside_context(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    uow = sqlite_unit_of_work()

    with pytest.raises(StartupError):
        _ = uow.repositories
