"""Domain core: descriptors, identifier registry, reconciliation and projection."""

from __future__ import annotations

from .catalog import InMemoryRepeaterCatalog, RepeaterCatalog
from .descriptors import RepeaterOverride, parse_repeater_definitions, resolve_descriptor
from .errors import (
    InvalidPayloadError,
    MissingRepeaterMetadataError,
    NotFoundError,
    PersistenceValidationError,
    UnknownEntityTypeError,
    ValidationError,
)
from .session_ids import SessionIdentifierRegistry
from .types import (
    EntityRecord,
    EntityRef,
    ManyToMany,
    ParentEntity,
    Plain,
    Polymorphic,
    RelationKind,
    RepeaterDescriptor,
    RepeaterMetadata,
)

__all__ = [
    "EntityRecord",
    "EntityRef",
    "InMemoryRepeaterCatalog",
    "InvalidPayloadError",
    "ManyToMany",
    "MissingRepeaterMetadataError",
    "NotFoundError",
    "ParentEntity",
    "PersistenceValidationError",
    "Plain",
    "Polymorphic",
    "RelationKind",
    "RepeaterCatalog",
    "RepeaterDescriptor",
    "RepeaterMetadata",
    "RepeaterOverride",
    "SessionIdentifierRegistry",
    "UnknownEntityTypeError",
    "ValidationError",
    "parse_repeater_definitions",
    "resolve_descriptor",
]
