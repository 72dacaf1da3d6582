"""Project persisted repeater children back into form field-sets."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, cast

from formsync.config.form_fields import FormFieldsConfig
from formsync.domain.projection.fieldset import (
    FieldKey,
    ProjectedFieldSet,
    ProjectedItem,
    RepeaterEntry,
    RepeaterProjection,
)
from formsync.domain.types import ManyToMany, RepeaterArrayProvider

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from formsync.domain.catalog import RepeaterCatalog
    from formsync.domain.ports.persistence import RepeaterRepository, RepositoryProvider
    from formsync.domain.types import (
        EntityRecord,
        Fields,
        ParentEntity,
        RepeaterDescriptor,
        RepeaterMetadata,
    )

log = logging.getLogger(__name__)


class RepeaterProjector:
    """Walk a parent's repeater children (recursively) into a :class:`ProjectedFieldSet`."""

    def __init__(
        self,
        provider: RepositoryProvider,
        catalog: RepeaterCatalog,
        config: FormFieldsConfig | None = None,
    ) -> None:
        self.provider = provider
        self.catalog = catalog
        self.config = config or FormFieldsConfig()

    def project(
        self,
        parent: ParentEntity,
        descriptor: RepeaterDescriptor,
        fieldset: ProjectedFieldSet | None = None,
    ) -> ProjectedFieldSet:
        """Merge the projection of one repeater into ``fieldset`` (a new one if omitted)."""

        fieldset = fieldset if fieldset is not None else ProjectedFieldSet()
        fieldset.add(self.project_relation(parent, descriptor))
        return fieldset

    def project_all(
        self,
        parent: ParentEntity,
        fieldset: ProjectedFieldSet | None = None,
    ) -> ProjectedFieldSet:
        """Project every repeater configured for ``parent``'s entity type."""

        fieldset = fieldset if fieldset is not None else ProjectedFieldSet()
        for descriptor in self.provider.repeaters_for(parent.entity_type):
            self.project(parent, descriptor, fieldset)
        return fieldset

    def project_relation(
        self,
        parent: ParentEntity,
        descriptor: RepeaterDescriptor,
    ) -> RepeaterProjection:
        repository = self.provider.repository(descriptor.entity_type)
        projection = RepeaterProjection(name=descriptor.name, relation=descriptor.relation)
        records = self._children(parent, descriptor, repository)
        if records:
            # only relations with children need a registered component
            metadata = self.catalog.lookup(descriptor.name)
            projection.items.extend(
                self._project_item(record, descriptor, metadata, repository) for record in records
            )
        log.debug(
            "Projected %s %s items for %s #%s",
            len(projection.items),
            descriptor.name,
            parent.entity_type,
            parent.id,
        )
        return projection

    def _children(
        self,
        parent: ParentEntity,
        descriptor: RepeaterDescriptor,
        repository: RepeaterRepository,
    ) -> Sequence[EntityRecord]:
        kind = descriptor.kind
        if isinstance(kind, ManyToMany):
            return self.provider.associations(parent.entity_type, descriptor.relation).related(
                parent.id
            )
        return repository.related(kind.scope(parent, descriptor.relation))

    def _project_item(
        self,
        record: EntityRecord,
        descriptor: RepeaterDescriptor,
        metadata: RepeaterMetadata,
        repository: RepeaterRepository,
    ) -> ProjectedItem:
        form = repository.get_form_fields(record)
        item = ProjectedItem(
            relation=descriptor.relation,
            record_id=record.id,
            entry=RepeaterEntry(
                id=f"{descriptor.relation}-{record.id}",
                type=metadata.component,
                title=metadata.title,
                title_field=metadata.title_field,
                hide_title_prefix=metadata.hide_title_prefix,
            ),
        )

        item.fields.extend(form.translations.items())
        item.medias = self._keyed(form.medias, partitioned=self.config.translated_media_fields)
        item.files = self._keyed(form.files, partitioned=self.config.translated_file_fields)
        item.browsers = dict(form.browsers)
        item.fields.extend(self._attributes(record, form.translations).items())

        item.children = dict(form.repeaters)
        for nested in self.provider.repeaters_for(descriptor.entity_type):
            item.children[nested.name] = self.project_relation(record, nested)
        return item

    @staticmethod
    def _attributes(record: EntityRecord, translations: Mapping[str, Any]) -> Fields:
        if isinstance(record, RepeaterArrayProvider):
            return record.to_repeater_array()
        return {
            key: value
            for key, value in record.attributes_to_dict().items()
            if key not in translations
        }

    @staticmethod
    def _keyed(values: Mapping[str, Any], *, partitioned: bool) -> dict[FieldKey, Any]:
        if not partitioned:
            return {FieldKey(role): value for role, value in values.items()}
        keyed: dict[FieldKey, Any] = {}
        for locale, roles in values.items():
            for role, value in cast("Mapping[str, Any]", roles).items():
                keyed[FieldKey(role, locale)] = value
        return keyed


def project(
    parent: ParentEntity,
    descriptor: RepeaterDescriptor,
    *,
    provider: RepositoryProvider,
    catalog: RepeaterCatalog,
    config: FormFieldsConfig | None = None,
    fieldset: ProjectedFieldSet | None = None,
) -> ProjectedFieldSet:
    """Project one relation of ``parent``; see :class:`RepeaterProjector`."""

    return RepeaterProjector(provider, catalog, config).project(parent, descriptor, fieldset)
