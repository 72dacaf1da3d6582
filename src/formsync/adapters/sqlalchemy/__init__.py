"""SQLAlchemy adapter package for formsync."""

from __future__ import annotations

from .mappings import (
    UTCDateTime,
    association_table,
    create_all_tables,
    new_metadata,
    repeater_table,
)
from .repositories import (
    AssociationSpec,
    EntityTypeRegistry,
    EntityTypeSpec,
    SqlAlchemyAssociationRepository,
    SqlAlchemyRepeaterRepository,
    SqlAlchemyRepositoryProvider,
)
from .unit_of_work import SqlAlchemyUnitOfWork, StartupError, shutdown, startup

__all__ = [
    "AssociationSpec",
    "EntityTypeRegistry",
    "EntityTypeSpec",
    "SqlAlchemyAssociationRepository",
    "SqlAlchemyRepeaterRepository",
    "SqlAlchemyRepositoryProvider",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "UTCDateTime",
    "association_table",
    "create_all_tables",
    "new_metadata",
    "repeater_table",
    "shutdown",
    "startup",
]
