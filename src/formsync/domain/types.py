"""Value types shared by the reconciliation and projection engines."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from formsync.domain.naming import foreign_key_for

type RecordId = int
type Fields = dict[str, Any]

DELETED_AT = "deleted_at"
POSITION = "position"


@runtime_checkable
class ParentEntity(Protocol):
    """Anything repeater children can hang off: an entity type name plus a persisted id."""

    @property
    def entity_type(self) -> str: ...

    @property
    def id(self) -> RecordId: ...


@dataclass(frozen=True, slots=True)
class EntityRef:
    """Bare reference to a persisted entity."""

    entity_type: str
    id: RecordId


@dataclass(frozen=True, slots=True)
class EntityRecord:
    """A persisted row as handed out by a repository."""

    entity_type: str
    id: RecordId
    attributes: Mapping[str, Any] = field(default_factory=dict)

    def attributes_to_dict(self) -> Fields:
        return dict(self.attributes)


@runtime_checkable
class RepeaterArrayProvider(Protocol):
    """Records that decide for themselves which attributes a repeater form shows."""

    def to_repeater_array(self) -> Fields: ...


# Relation kinds ---------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Plain:
    """One-to-many through a foreign key column on the child table."""

    foreign_key: str | None = None

    def scope(self, parent: ParentEntity, relation: str) -> Fields:
        _ = relation
        column = self.foreign_key or foreign_key_for(parent.entity_type)
        return {column: parent.id}


@dataclass(frozen=True, slots=True)
class Polymorphic:
    """One-to-many where the child stores both the parent's type and id."""

    morph: str | None = None

    def columns(self, relation: str) -> tuple[str, str]:
        prefix = self.morph or relation
        return f"{prefix}_type", f"{prefix}_id"

    def scope(self, parent: ParentEntity, relation: str) -> Fields:
        type_column, id_column = self.columns(relation)
        return {type_column: parent.entity_type, id_column: parent.id}


@dataclass(frozen=True, slots=True)
class ManyToMany:
    """Children linked through an association table.

    With ``keep_existing`` disabled every association is dropped before the
    submitted items are re-created.
    """

    keep_existing: bool = True


type RelationKind = Plain | Polymorphic | ManyToMany


@dataclass(frozen=True, slots=True)
class RepeaterDescriptor:
    """Resolved wiring of one repeater on a parent entity type."""

    name: str
    relation: str
    entity_type: str
    kind: RelationKind = Plain()


@dataclass(frozen=True, slots=True)
class RepeaterMetadata:
    """Rendering metadata of a repeater component."""

    component: str
    title: str
    title_field: str | None = None
    hide_title_prefix: bool = False
