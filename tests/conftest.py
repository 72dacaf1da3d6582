from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import JSON, Column, String, create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from formsync.adapters.sqlalchemy import (
    AssociationSpec,
    EntityTypeRegistry,
    EntityTypeSpec,
    association_table,
    create_all_tables,
    new_metadata,
    repeater_table,
)
from formsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, shutdown, startup
from formsync.domain import ManyToMany, Polymorphic, RepeaterOverride, parse_repeater_definitions
from formsync.domain.reconciliation import ReconciliationContext
from formsync.domain.session_ids import SessionIdentifierRegistry
from tests.helpers.clock import FIXED_NOW

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture
def context() -> ReconciliationContext:
    return ReconciliationContext(identifiers=SessionIdentifierRegistry(), clock=lambda: FIXED_NOW)


@pytest.fixture
def registry() -> EntityTypeRegistry:
    """Article with plain ``images``, polymorphic ``slides``, many-to-many ``links``.

    Images carry a nested ``tags`` repeater.
    """

    metadata = new_metadata()
    article_table = repeater_table("articles", metadata, Column("title", String))
    image_table = repeater_table(
        "images",
        metadata,
        Column("caption", String),
        Column("languages", JSON),
        foreign_key="article_id",
    )
    tag_table = repeater_table("tags", metadata, Column("label", String), foreign_key="image_id")
    slide_table = repeater_table(
        "slides", metadata, Column("heading", String), morph="slideable"
    )
    link_table = repeater_table("links", metadata, Column("url", String))
    article_link_table = association_table(
        "article_link",
        metadata,
        parent_column="article_id",
        child_column="link_id",
        child_table="links",
    )

    registry = EntityTypeRegistry(metadata)
    registry.register(
        EntityTypeSpec(
            name="Article",
            table=article_table,
            repeaters=parse_repeater_definitions(
                {
                    "images": None,
                    "slides": RepeaterOverride(kind=Polymorphic("slideable")),
                    "links": RepeaterOverride(kind=ManyToMany(keep_existing=False)),
                }
            ),
        )
    )
    registry.register(
        EntityTypeSpec(
            name="Image", table=image_table, repeaters=parse_repeater_definitions(["tags"])
        )
    )
    registry.register(EntityTypeSpec(name="Tag", table=tag_table))
    registry.register(EntityTypeSpec(name="Slide", table=slide_table))
    registry.register(EntityTypeSpec(name="Link", table=link_table))
    registry.register_association(
        AssociationSpec(
            parent_type="Article",
            relation="links",
            table=article_link_table,
            parent_column="article_id",
            child_column="link_id",
        )
    )
    return registry


@pytest.fixture
def sqlite_engine(registry: EntityTypeRegistry) -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    create_all_tables(engine, registry.metadata)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
    registry: EntityTypeRegistry,
) -> Iterator[Callable[[], SqlAlchemyUnitOfWork]]:
    startup(registry, engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()
