"""Resolve repeater names into relation / entity type descriptors.

Repeaters are declared per parent entity type either by bare name::

    ("article_repeater", "page_repeater")

or with explicit overrides::

    {
        "article_repeater": None,
        "page_repeater": RepeaterOverride(model="Page", relation="pages"),
    }

Missing pieces are inferred by convention: the relation is the camel-cased
repeater name and the entity type its studly-cased singular.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from formsync.domain.naming import camel, singular, studly
from formsync.domain.types import Plain, RepeaterDescriptor

if TYPE_CHECKING:
    from collections.abc import Iterable

    from formsync.domain.types import RelationKind


@dataclass(frozen=True, slots=True)
class RepeaterOverride:
    """Explicit configuration for one repeater; ``None`` fields fall back to convention."""

    relation: str | None = None
    model: str | None = None
    kind: RelationKind | None = None


type RepeaterDefinitions = (
    Iterable[str] | Mapping[str, RepeaterOverride | Mapping[str, object] | None]
)


def infer_relation(repeater_name: str) -> str:
    """Guess the relation name (lower camel case, e.g. ``userGroup``)."""

    return camel(repeater_name)


def infer_entity_type(repeater_name: str) -> str:
    """Guess the entity type (singular upper camel case, e.g. ``ArticleType``)."""

    return studly(singular(repeater_name))


def resolve_descriptor(
    repeater_name: str,
    override: RepeaterOverride | None = None,
) -> RepeaterDescriptor:
    """Resolve one repeater. Pure: no lookups, never fails."""

    override = override or RepeaterOverride()
    return RepeaterDescriptor(
        name=repeater_name,
        relation=override.relation or infer_relation(repeater_name),
        entity_type=override.model or infer_entity_type(repeater_name),
        kind=override.kind or Plain(),
    )


def _coerce_override(value: RepeaterOverride | Mapping[str, object] | None) -> RepeaterOverride:
    if value is None:
        return RepeaterOverride()
    if isinstance(value, RepeaterOverride):
        return value
    relation = value.get("relation")
    model = value.get("model")
    kind = value.get("kind")
    return RepeaterOverride(
        relation=str(relation) if relation else None,
        model=str(model) if model else None,
        kind=kind,  # type: ignore[arg-type]
    )


def parse_repeater_definitions(definitions: RepeaterDefinitions) -> tuple[RepeaterDescriptor, ...]:
    """Resolve every declared repeater, keeping declaration order."""

    if isinstance(definitions, Mapping):
        return tuple(
            resolve_descriptor(name, _coerce_override(value))
            for name, value in definitions.items()
        )
    return tuple(resolve_descriptor(name) for name in definitions)
