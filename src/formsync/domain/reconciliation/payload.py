"""Pydantic models for the submitted repeater payload.

The payload arrives as ``fields["repeaters"][<repeater name>]``: an ordered list
of free-form field maps. Only the reserved keys are typed here; everything else
is carried through untouched for the persistence layer to judge.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, cast

import pydantic
from pydantic import BaseModel, ConfigDict

from formsync.domain.errors import InvalidPayloadError
from formsync.domain.types import POSITION, Fields


class LanguageEntry(BaseModel):
    model_config = ConfigDict(extra="allow")

    value: str
    published: bool | None = None


class SubmittedRepeaterItem(BaseModel):
    """One row of a repeater as posted by the form."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: str | None = None
    active: dict[str, Any] | None = None
    languages: list[LanguageEntry] | None = None
    repeaters: dict[str, Any] | None = None

    @property
    def client_id(self) -> str | None:
        return self.id

    def to_fields(self, *, position: int) -> Fields:
        """Field map handed to the repository: the submitted keys minus ``id``/``repeaters``."""

        fields = self.model_dump(exclude={"id", "repeaters"}, exclude_unset=True)
        fields[POSITION] = position
        return fields


def parse_repeater_items(
    fields: Mapping[str, Any], repeater_name: str
) -> list[SubmittedRepeaterItem]:
    """Read ``fields["repeaters"][repeater_name]``; a missing or empty entry yields no items."""

    repeaters = fields.get("repeaters") or {}
    if not isinstance(repeaters, Mapping):
        raise InvalidPayloadError("'repeaters' must map repeater names to item lists")
    raw_items = cast(Mapping[str, Any], repeaters).get(repeater_name) or []
    if isinstance(raw_items, Mapping):
        # index-keyed lists: {"0": {...}, "1": {...}}
        raw_items = list(cast(Mapping[str, Any], raw_items).values())

    items: list[SubmittedRepeaterItem] = []
    for index, raw in enumerate(raw_items):
        try:
            items.append(SubmittedRepeaterItem.model_validate(raw))
        except pydantic.ValidationError as exc:
            raise InvalidPayloadError(
                f"Invalid item #{index + 1} for repeater {repeater_name!r}: {exc}"
            ) from exc
    return items


def locale_published(fields: Mapping[str, Any], locale: str) -> bool:
    """Per-locale ``active`` flag of the parent submission (``fields[locale]["active"]``)."""

    locale_fields = fields.get(locale)
    if isinstance(locale_fields, Mapping):
        return bool(cast(Mapping[str, Any], locale_fields).get("active", False))
    return False


def derive_languages(
    item: SubmittedRepeaterItem,
    parent_fields: Mapping[str, Any],
) -> list[dict[str, Any]] | None:
    """Languages entries following the parent's per-locale active flags.

    Only applies when the item carries an ``active`` map but no explicit
    ``languages``; returns ``None`` otherwise.
    """

    if item.languages is not None or item.active is None:
        return None
    return [
        {"value": locale, "published": locale_published(parent_fields, locale)}
        for locale in item.active
    ]
