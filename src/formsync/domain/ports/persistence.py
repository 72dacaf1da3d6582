"""Ports for the persistence collaborators driven by reconciliation and projection."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from formsync.domain.projection.fieldset import FormFields
    from formsync.domain.types import EntityRecord, RecordId, RepeaterDescriptor


@runtime_checkable
class RepeaterRepository(Protocol):
    """Per entity type store of repeater child rows keyed by simple field maps."""

    def create(self, fields: Mapping[str, object]) -> EntityRecord: ...

    def update(self, record_id: RecordId, fields: Mapping[str, object]) -> None:
        """Update one row; raise ``NotFoundError`` when it does not exist."""
        ...

    def update_basic(
        self,
        record_id: RecordId | None,
        updates: Mapping[str, object],
        where: Mapping[str, object],
    ) -> int:
        """Bulk update active rows matching ``where`` (and ``record_id``); return the row count."""
        ...

    def related(self, scope: Mapping[str, object]) -> Sequence[EntityRecord]:
        """Active rows matching ``scope`` in display order."""
        ...

    def get_form_fields(self, record: EntityRecord) -> FormFields: ...


@runtime_checkable
class AssociationRepository(Protocol):
    """Association rows of one many-to-many relation."""

    def attach(self, parent_id: RecordId, child_id: RecordId) -> None: ...

    def detach_all(self, parent_id: RecordId) -> int: ...

    def related(self, parent_id: RecordId) -> Sequence[EntityRecord]: ...


@runtime_checkable
class RepositoryProvider(Protocol):
    """Hands out repositories by entity type and the repeaters configured per type."""

    def repository(self, entity_type: str) -> RepeaterRepository: ...

    def associations(self, parent_type: str, relation: str) -> AssociationRepository: ...

    def repeaters_for(self, entity_type: str) -> tuple[RepeaterDescriptor, ...]: ...
