"""Projected repeater field-sets.

Projection keeps nesting as a tree (repeater -> items -> child repeaters) and
only flattens it into the form's composite keys in :meth:`ProjectedFieldSet.to_payload`:

* field names look like ``blocks[<relation>-<id>][<attribute>]`` with an
  optional trailing ``[<locale>]``;
* a nested repeater's item list is published under
  ``blocks-<relation>-<id>_<child repeater name>``;
* nested field, media, file and browser entries are merged into the
  accumulators of the top-level repeater they belong to.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from formsync.domain.types import RecordId


@dataclass(slots=True)
class FormFields:
    """Form field-set of one entity as produced by its repository.

    ``medias`` and ``files`` are ``{role: value}`` maps, or
    ``{locale: {role: value}}`` when locale partitioning is enabled.
    """

    translations: dict[str, Any] = field(default_factory=dict)
    medias: dict[str, Any] = field(default_factory=dict)
    files: dict[str, Any] = field(default_factory=dict)
    browsers: dict[str, Any] = field(default_factory=dict)
    repeaters: dict[str, RepeaterProjection] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class FieldKey:
    attribute: str
    locale: str | None = None


@dataclass(frozen=True, slots=True)
class RepeaterEntry:
    """One row of the repeater list rendered by the form."""

    id: str
    type: str
    title: str
    title_field: str | None = None
    hide_title_prefix: bool = False

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "titleField": self.title_field,
            "hideTitlePrefix": self.hide_title_prefix,
        }


@dataclass(slots=True)
class ProjectedItem:
    relation: str
    record_id: RecordId
    entry: RepeaterEntry
    fields: list[tuple[str, Any]] = field(default_factory=list)
    medias: dict[FieldKey, Any] = field(default_factory=dict)
    files: dict[FieldKey, Any] = field(default_factory=dict)
    browsers: dict[str, Any] = field(default_factory=dict)
    children: dict[str, RepeaterProjection] = field(default_factory=dict)

    @property
    def key(self) -> str:
        return f"{self.relation}-{self.record_id}"

    def field_name(self, attribute: str, locale: str | None = None) -> str:
        name = f"blocks[{self.key}][{attribute}]"
        return f"{name}[{locale}]" if locale is not None else name

    def child_list_name(self, repeater_name: str) -> str:
        return f"blocks-{self.key}_{repeater_name}"


@dataclass(slots=True)
class RepeaterProjection:
    name: str
    relation: str
    items: list[ProjectedItem] = field(default_factory=list)

    def entries(self) -> list[dict[str, Any]]:
        return [item.entry.to_payload() for item in self.items]


@dataclass(slots=True)
class _Accumulator:
    fields: list[dict[str, Any]] = field(default_factory=list)
    medias: dict[str, Any] = field(default_factory=dict)
    files: dict[str, Any] = field(default_factory=dict)
    browsers: dict[str, Any] = field(default_factory=dict)

    def collect(self, projection: RepeaterProjection, lists: dict[str, Any]) -> None:
        for item in projection.items:
            self.fields.extend(
                {"name": item.field_name(attribute), "value": value}
                for attribute, value in item.fields
            )
            for key, value in item.medias.items():
                self.medias[item.field_name(key.attribute, key.locale)] = value
            for key, value in item.files.items():
                self.files[item.field_name(key.attribute, key.locale)] = value
            for attribute, value in item.browsers.items():
                self.browsers[item.field_name(attribute)] = value
            for child_name, child in item.children.items():
                lists[item.child_list_name(child_name)] = child.entries()
                self.collect(child, lists)


@dataclass(slots=True)
class ProjectedFieldSet:
    """Projections of every repeater on one form, keyed by repeater name."""

    repeaters: dict[str, RepeaterProjection] = field(default_factory=dict)

    def add(self, projection: RepeaterProjection) -> None:
        self.repeaters[projection.name] = projection

    def __getitem__(self, name: str) -> RepeaterProjection:
        return self.repeaters[name]

    def to_payload(self) -> dict[str, dict[str, Any]]:
        """Flatten into the form payload consumed by the rendering layer."""

        payload: dict[str, dict[str, Any]] = {
            "repeaters": {},
            "repeaterFields": {},
            "repeaterMedias": {},
            "repeaterFiles": {},
            "repeaterBrowsers": {},
        }
        for name, projection in self.repeaters.items():
            accumulator = _Accumulator()
            accumulator.collect(projection, payload["repeaters"])
            payload["repeaters"][name] = projection.entries()
            payload["repeaterFields"][name] = accumulator.fields
            payload["repeaterMedias"][name] = accumulator.medias
            payload["repeaterFiles"][name] = accumulator.files
            payload["repeaterBrowsers"][name] = accumulator.browsers
        return payload
