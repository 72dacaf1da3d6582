"""SQLAlchemy table builders for repeater child and association tables."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    TypeDecorator,
)

from formsync.domain.types import DELETED_AT, POSITION, Polymorphic

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine
    from sqlalchemy.schema import SchemaItem

log = logging.getLogger(__name__)

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


def new_metadata() -> MetaData:
    return MetaData(naming_convention=NAMING_CONVENTION)


def repeater_table(
    name: str,
    metadata: MetaData,
    *columns: SchemaItem,
    foreign_key: str | None = None,
    morph: Polymorphic | str | None = None,
) -> Table:
    """Build a repeater child table.

    Every child table gets an integer ``id``, a ``position`` and a nullable
    ``deleted_at``. ``foreign_key`` adds the owning column of a plain relation;
    ``morph`` adds the ``<prefix>_type`` / ``<prefix>_id`` pair of a polymorphic one.
    """

    base: list[SchemaItem] = [
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column(POSITION, Integer, nullable=False, default=1),
        Column(DELETED_AT, UTCDateTime, nullable=True),
    ]
    if foreign_key is not None:
        base.append(Column(foreign_key, Integer, nullable=False))
        base.append(Index(f"ix_{name}_{foreign_key}", foreign_key))
    if morph is not None:
        prefix = morph if isinstance(morph, str) else morph.morph
        if prefix is None:
            raise ValueError("Polymorphic repeater tables need an explicit morph prefix")
        type_column, id_column = Polymorphic(prefix).columns(prefix)
        base.append(Column(type_column, String, nullable=False))
        base.append(Column(id_column, Integer, nullable=False))
        base.append(Index(f"ix_{name}_{prefix}", type_column, id_column))
    return Table(name, metadata, *base, *columns)


def association_table(
    name: str,
    metadata: MetaData,
    *,
    parent_column: str,
    child_column: str,
    child_table: str,
) -> Table:
    """Build a many-to-many association table pointing at ``child_table``."""

    return Table(
        name,
        metadata,
        Column(parent_column, Integer, primary_key=True),
        Column(
            child_column,
            Integer,
            ForeignKey(f"{child_table}.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )


def create_all_tables(engine: Engine, metadata: MetaData) -> None:
    """Create database tables for ``metadata``."""

    log.info("Creating all tables")
    metadata.create_all(engine)
