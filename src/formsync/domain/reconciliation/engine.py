"""Create / update / soft-delete reconciliation of one repeater relation.

For owned relations (plain foreign key or polymorphic morph pair) the engine:

1. soft-deletes every active child when nothing was submitted;
2. walks the submitted items in order, assigning ``position = index + 1``;
3. rewrites client tokens it already knows into ``<relation>-<id>``;
4. derives ``languages`` from the parent's per-locale ``active`` flags;
5. updates ``<relation>-<id>`` items in place and creates everything else,
   registering the new id under the client token;
6. soft-deletes the active children that were not part of the submission.

Many-to-many relations are simpler: optionally drop all associations, then
create and attach every submitted item.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from formsync.domain.reconciliation.payload import derive_languages, parse_repeater_items
from formsync.domain.session_ids import SessionIdentifierRegistry
from formsync.domain.types import DELETED_AT, EntityRef, ManyToMany, RecordId

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from formsync.domain.ports.persistence import RepeaterRepository, RepositoryProvider
    from formsync.domain.reconciliation.payload import SubmittedRepeaterItem
    from formsync.domain.types import (
        Fields,
        ParentEntity,
        Plain,
        Polymorphic,
        RepeaterDescriptor,
    )

log = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(slots=True)
class ReconciliationContext:
    """Request-scoped state threaded through every reconciliation of one submission."""

    identifiers: SessionIdentifierRegistry = field(default_factory=SessionIdentifierRegistry)
    clock: Callable[[], datetime] = _utcnow


@dataclass(slots=True)
class ReconciliationResult:
    """What one reconciliation did to a relation."""

    repeater_name: str
    relation: str
    current_ids: list[RecordId] = field(default_factory=list)
    created: list[RecordId] = field(default_factory=list)
    updated: list[RecordId] = field(default_factory=list)
    deleted: list[RecordId] = field(default_factory=list)
    cleared: bool = False
    detached: int = 0
    nested: list[ReconciliationResult] = field(default_factory=list)


def relation_prefix(relation: str) -> str:
    return f"{relation}-"


def existing_record_id(client_id: str | None, relation: str) -> RecordId | None:
    """Persisted id encoded in ``<relation>-<id>``, or ``None`` for anything else."""

    prefix = relation_prefix(relation)
    if client_id is None or not client_id.startswith(prefix):
        return None
    suffix = client_id.removeprefix(prefix)
    if not suffix.isdigit():
        return None
    return int(suffix)


class RepeaterReconciler:
    """Drive persisted repeater children to match a submission."""

    def __init__(
        self,
        provider: RepositoryProvider,
        context: ReconciliationContext | None = None,
    ) -> None:
        self.provider = provider
        self.context = context or ReconciliationContext()

    def reconcile(
        self,
        parent: ParentEntity,
        fields: Mapping[str, Any],
        descriptor: RepeaterDescriptor,
        *,
        locale_fields: Mapping[str, Any] | None = None,
    ) -> ReconciliationResult:
        """Reconcile ``descriptor``'s relation of ``parent`` against ``fields``.

        ``locale_fields`` supplies the per-locale ``active`` flags used for
        ``languages`` derivation and defaults to ``fields`` itself.
        """

        items = parse_repeater_items(fields, descriptor.name)
        locale_source = fields if locale_fields is None else locale_fields
        match descriptor.kind:
            case ManyToMany() as kind:
                result = self._reconcile_many_to_many(parent, items, descriptor, kind)
            case kind:
                result = self._reconcile_owned(parent, items, descriptor, kind, locale_source)

        log.info(
            "Reconciled repeater %s on %s #%s: created=%s, updated=%s, deleted=%s",
            descriptor.name,
            parent.entity_type,
            parent.id,
            len(result.created),
            len(result.updated),
            "all" if result.cleared else len(result.deleted),
        )
        return result

    def reconcile_all(
        self,
        parent: ParentEntity,
        fields: Mapping[str, Any],
        *,
        locale_fields: Mapping[str, Any] | None = None,
    ) -> list[ReconciliationResult]:
        """Reconcile every repeater declared for ``parent``'s entity type, in order."""

        return [
            self.reconcile(parent, fields, descriptor, locale_fields=locale_fields)
            for descriptor in self.provider.repeaters_for(parent.entity_type)
        ]

    # Owned relations ---------------------------------------------------------

    def _reconcile_owned(
        self,
        parent: ParentEntity,
        items: list[SubmittedRepeaterItem],
        descriptor: RepeaterDescriptor,
        kind: Plain | Polymorphic,
        locale_fields: Mapping[str, Any],
    ) -> ReconciliationResult:
        relation = descriptor.relation
        repository = self.provider.repository(descriptor.entity_type)
        scope = kind.scope(parent, relation)
        result = ReconciliationResult(repeater_name=descriptor.name, relation=relation)

        if not items:
            count = repository.update_basic(None, self._deletion_mark(), scope)
            log.debug("Soft-deleted %s %s rows scoped by %s", count, relation, scope)
            result.cleared = True
            return result

        for index, item in enumerate(items):
            child_fields = item.to_fields(position=index + 1)
            client_id = self._resolve_client_id(item.client_id, relation)
            languages = derive_languages(item, locale_fields)
            if languages is not None:
                child_fields["languages"] = languages

            record_id = existing_record_id(client_id, relation)
            if record_id is not None:
                repository.update(record_id, child_fields)
                result.updated.append(record_id)
                log.debug("Updated %s #%s at position %s", relation, record_id, index + 1)
            else:
                child_fields.update(scope)
                record = repository.create(child_fields)
                record_id = record.id
                result.created.append(record_id)
                if item.client_id is not None:
                    self.context.identifiers.register(item.client_id, record_id)
                log.debug(
                    "Created %s #%s for client id %r at position %s",
                    relation,
                    record_id,
                    item.client_id,
                    index + 1,
                )
            result.current_ids.append(record_id)
            result.nested.extend(
                self._reconcile_nested(EntityRef(descriptor.entity_type, record_id), item)
            )

        # stale: active in scope but absent from this submission
        current = set(result.current_ids)
        for record in repository.related(scope):
            if record.id in current:
                continue
            repository.update_basic(None, self._deletion_mark(), {"id": record.id})
            result.deleted.append(record.id)
            log.debug("Soft-deleted stale %s #%s", relation, record.id)
        return result

    def _resolve_client_id(self, client_id: str | None, relation: str) -> str | None:
        if client_id is None or client_id.startswith(relation_prefix(relation)):
            return client_id
        record_id = self.context.identifiers.resolve(client_id)
        if record_id is None:
            return client_id
        return f"{relation_prefix(relation)}{record_id}"

    def _deletion_mark(self) -> Fields:
        return {DELETED_AT: self.context.clock()}

    # Many-to-many ------------------------------------------------------------

    def _reconcile_many_to_many(
        self,
        parent: ParentEntity,
        items: list[SubmittedRepeaterItem],
        descriptor: RepeaterDescriptor,
        kind: ManyToMany,
    ) -> ReconciliationResult:
        # no update-in-place here: every submission re-creates its child rows
        repository = self.provider.repository(descriptor.entity_type)
        associations = self.provider.associations(parent.entity_type, descriptor.relation)
        result = ReconciliationResult(repeater_name=descriptor.name, relation=descriptor.relation)

        if not kind.keep_existing:
            result.detached = associations.detach_all(parent.id)
            log.debug("Detached %s %s associations", result.detached, descriptor.relation)

        for index, item in enumerate(items):
            record = repository.create(item.to_fields(position=index + 1))
            associations.attach(parent.id, record.id)
            result.created.append(record.id)
            result.current_ids.append(record.id)
            if item.client_id is not None:
                self.context.identifiers.register(item.client_id, record.id)
            result.nested.extend(
                self._reconcile_nested(EntityRef(descriptor.entity_type, record.id), item)
            )
        return result

    # Nesting -----------------------------------------------------------------

    def _reconcile_nested(
        self,
        child: EntityRef,
        item: SubmittedRepeaterItem,
    ) -> list[ReconciliationResult]:
        descriptors = self.provider.repeaters_for(child.entity_type)
        if not descriptors:
            return []
        # the item itself is the parent submission of its nested rows
        nested_fields = item.model_dump()
        return [
            self.reconcile(child, nested_fields, descriptor)
            for descriptor in descriptors
        ]


def reconcile(
    parent: ParentEntity,
    fields: Mapping[str, Any],
    descriptor: RepeaterDescriptor,
    *,
    provider: RepositoryProvider,
    context: ReconciliationContext | None = None,
) -> ReconciliationResult:
    """Reconcile one relation of ``parent``; see :class:`RepeaterReconciler`."""

    return RepeaterReconciler(provider, context).reconcile(parent, fields, descriptor)
