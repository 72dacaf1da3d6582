"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from sqlalchemy import and_, delete, insert, select, true, update
from sqlalchemy.exc import IntegrityError

from formsync.domain.errors import (
    NotFoundError,
    PersistenceValidationError,
    UnknownEntityTypeError,
)
from formsync.domain.projection.fieldset import FormFields
from formsync.domain.types import (
    DELETED_AT,
    POSITION,
    EntityRecord,
    ManyToMany,
    Plain,
    Polymorphic,
    RepeaterDescriptor,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from sqlalchemy import ColumnElement, MetaData, Table
    from sqlalchemy.engine import RowMapping
    from sqlalchemy.orm import Session

    from formsync.domain.types import RecordId

log = logging.getLogger(__name__)

type FormFieldsHook = Callable[[EntityRecord], FormFields]


@dataclass(frozen=True, slots=True)
class EntityTypeSpec:
    """How one entity type is stored and which repeaters hang off it.

    ``record_cls`` builds the records handed out by the repository; subclasses may
    implement ``to_repeater_array``. ``form_fields`` supplies translations, medias,
    files and browsers for projection.
    """

    name: str
    table: Table
    repeaters: tuple[RepeaterDescriptor, ...] = ()
    record_cls: type[EntityRecord] = EntityRecord
    form_fields: FormFieldsHook | None = None


@dataclass(frozen=True, slots=True)
class AssociationSpec:
    """Association table of one many-to-many repeater relation."""

    parent_type: str
    relation: str
    table: Table
    parent_column: str
    child_column: str


@dataclass(slots=True)
class EntityTypeRegistry:
    """Startup-time registry of entity types and many-to-many associations."""

    metadata: MetaData
    _types: dict[str, EntityTypeSpec] = field(default_factory=dict)
    _associations: dict[tuple[str, str], AssociationSpec] = field(default_factory=dict)

    def register(self, spec: EntityTypeSpec) -> None:
        self._types[spec.name] = spec

    def register_association(self, spec: AssociationSpec) -> None:
        self._associations[(spec.parent_type, spec.relation)] = spec

    def get(self, entity_type: str) -> EntityTypeSpec:
        try:
            return self._types[entity_type]
        except KeyError:
            raise UnknownEntityTypeError(f"Unknown entity type {entity_type!r}") from None

    def association(self, parent_type: str, relation: str) -> AssociationSpec:
        try:
            return self._associations[(parent_type, relation)]
        except KeyError:
            raise UnknownEntityTypeError(
                f"No association registered for {parent_type}.{relation}"
            ) from None

    def repeaters_for(self, entity_type: str) -> tuple[RepeaterDescriptor, ...]:
        spec = self._types.get(entity_type)
        return spec.repeaters if spec is not None else ()

    def validate(self) -> None:
        """Fail fast on repeaters whose wiring cannot work at request time."""

        problems: list[str] = []
        for parent in self._types.values():
            for descriptor in parent.repeaters:
                problems.extend(self._problems(parent, descriptor))
        if problems:
            raise UnknownEntityTypeError("Invalid repeater configuration: " + "; ".join(problems))

    def _problems(self, parent: EntityTypeSpec, descriptor: RepeaterDescriptor) -> list[str]:
        label = f"{parent.name}.{descriptor.name}"
        child = self._types.get(descriptor.entity_type)
        if child is None:
            return [f"{label} targets unregistered entity type {descriptor.entity_type!r}"]

        columns = set(child.table.c.keys())
        match descriptor.kind:
            case ManyToMany():
                if (parent.name, descriptor.relation) not in self._associations:
                    return [f"{label} has no association table"]
                return []
            case Plain() as kind:
                required = {POSITION, DELETED_AT, *kind.scope(_Probe(parent.name), "").keys()}
            case Polymorphic() as kind:
                required = {POSITION, DELETED_AT, *kind.columns(descriptor.relation)}
        missing = sorted(required - columns)
        if missing:
            return [f"{label}: table {child.table.name!r} lacks columns {', '.join(missing)}"]
        return []


@dataclass(frozen=True, slots=True)
class _Probe:
    entity_type: str
    id: int = 0


def _active(table: Table) -> ColumnElement[bool]:
    return table.c[DELETED_AT].is_(None)


def _matching(table: Table, where: Mapping[str, object]) -> ColumnElement[bool]:
    clauses = [table.c[column] == value for column, value in where.items()]
    return and_(true(), *clauses)


class SqlAlchemyRepeaterRepository:
    """Child rows of one entity type stored in a plain SQLAlchemy Core table."""

    def __init__(self, session: Session, spec: EntityTypeSpec) -> None:
        self.session = session
        self.spec = spec
        self.table = spec.table

    def create(self, fields: Mapping[str, object]) -> EntityRecord:
        values = self._column_values(fields)
        values.pop("id", None)
        try:
            result = self.session.execute(insert(self.table).values(**values))
        except IntegrityError as exc:
            raise PersistenceValidationError(str(exc.orig)) from exc
        record_id = result.inserted_primary_key[0]
        record = self.get(record_id)
        if record is None:
            raise NotFoundError(f"{self.spec.name} #{record_id} vanished after insert")
        return record

    def update(self, record_id: RecordId, fields: Mapping[str, object]) -> None:
        values = self._column_values(fields)
        values.pop("id", None)
        if not values:
            if self.get(record_id) is None:
                raise NotFoundError(f"{self.spec.name} #{record_id} does not exist")
            return
        stmt = (
            update(self.table)
            .where(self.table.c.id == record_id)
            .where(_active(self.table))
            .values(**values)
        )
        try:
            result = self.session.execute(stmt)
        except IntegrityError as exc:
            raise PersistenceValidationError(str(exc.orig)) from exc
        if result.rowcount == 0:
            raise NotFoundError(f"{self.spec.name} #{record_id} does not exist")

    def update_basic(
        self,
        record_id: RecordId | None,
        updates: Mapping[str, object],
        where: Mapping[str, object],
    ) -> int:
        stmt = update(self.table).where(_matching(self.table, where)).where(_active(self.table))
        if record_id is not None:
            stmt = stmt.where(self.table.c.id == record_id)
        result = self.session.execute(stmt.values(**self._column_values(updates)))
        return result.rowcount

    def get(self, record_id: RecordId) -> EntityRecord | None:
        stmt = select(self.table).where(self.table.c.id == record_id).where(_active(self.table))
        row = self.session.execute(stmt).mappings().one_or_none()
        return self.to_record(row) if row is not None else None

    def related(self, scope: Mapping[str, object]) -> Sequence[EntityRecord]:
        stmt = (
            select(self.table)
            .where(_matching(self.table, scope))
            .where(_active(self.table))
            .order_by(self.table.c[POSITION], self.table.c.id)
        )
        return [self.to_record(row) for row in self.session.execute(stmt).mappings()]

    def get_form_fields(self, record: EntityRecord) -> FormFields:
        if self.spec.form_fields is None:
            return FormFields()
        return self.spec.form_fields(record)

    def _column_values(self, fields: Mapping[str, object]) -> dict[str, Any]:
        columns = self.table.c
        return {key: value for key, value in fields.items() if key in columns}

    def to_record(self, row: RowMapping) -> EntityRecord:
        attributes = dict(row)
        return self.spec.record_cls(
            entity_type=self.spec.name,
            id=attributes["id"],
            attributes=attributes,
        )


class SqlAlchemyAssociationRepository:
    """Association rows linking a parent to many-to-many repeater children."""

    def __init__(self, session: Session, spec: AssociationSpec, child: EntityTypeSpec) -> None:
        self.session = session
        self.spec = spec
        self.children = SqlAlchemyRepeaterRepository(session, child)

    def attach(self, parent_id: RecordId, child_id: RecordId) -> None:
        values = {self.spec.parent_column: parent_id, self.spec.child_column: child_id}
        self.session.execute(insert(self.spec.table).values(**values))

    def detach_all(self, parent_id: RecordId) -> int:
        table = self.spec.table
        stmt = delete(table).where(table.c[self.spec.parent_column] == parent_id)
        return self.session.execute(stmt).rowcount

    def related(self, parent_id: RecordId) -> Sequence[EntityRecord]:
        link = self.spec.table
        child = self.children.table
        stmt = (
            select(child)
            .join(link, link.c[self.spec.child_column] == child.c.id)
            .where(link.c[self.spec.parent_column] == parent_id)
            .where(_active(child))
            .order_by(child.c[POSITION], child.c.id)
        )
        rows = self.session.execute(stmt).mappings()
        return [self.children.to_record(row) for row in rows]


class SqlAlchemyRepositoryProvider:
    """Resolve repositories for registered entity types within one session."""

    def __init__(self, session: Session, registry: EntityTypeRegistry) -> None:
        self.session = session
        self.registry = registry

    def repository(self, entity_type: str) -> SqlAlchemyRepeaterRepository:
        return SqlAlchemyRepeaterRepository(self.session, self.registry.get(entity_type))

    def associations(self, parent_type: str, relation: str) -> SqlAlchemyAssociationRepository:
        spec = self.registry.association(parent_type, relation)
        child_type = self._child_type(parent_type, relation)
        return SqlAlchemyAssociationRepository(self.session, spec, self.registry.get(child_type))

    def repeaters_for(self, entity_type: str) -> tuple[RepeaterDescriptor, ...]:
        return self.registry.repeaters_for(entity_type)

    def _child_type(self, parent_type: str, relation: str) -> str:
        for descriptor in self.registry.repeaters_for(parent_type):
            if descriptor.relation == relation:
                return descriptor.entity_type
        raise UnknownEntityTypeError(f"{parent_type} declares no repeater relation {relation!r}")


if TYPE_CHECKING:
    from typing import cast

    from formsync.domain.ports.persistence import (
        AssociationRepository,
        RepeaterRepository,
        RepositoryProvider,
    )

    _session_stub = cast("Session", object())
    _spec_stub = cast("EntityTypeSpec", object())
    _repo_check: RepeaterRepository = SqlAlchemyRepeaterRepository(_session_stub, _spec_stub)
    _assoc_check: AssociationRepository = SqlAlchemyAssociationRepository(
        _session_stub, cast("AssociationSpec", object()), _spec_stub
    )
    _provider_check: RepositoryProvider = SqlAlchemyRepositoryProvider(
        _session_stub, cast("EntityTypeRegistry", object())
    )
