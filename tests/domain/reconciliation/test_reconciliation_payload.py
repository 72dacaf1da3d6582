from __future__ import annotations

import pytest

from formsync.domain.errors import InvalidPayloadError
from formsync.domain.reconciliation import (
    SubmittedRepeaterItem,
    derive_languages,
    parse_repeater_items,
)


def test_missing_repeater_yields_no_items() -> None:
    assert parse_repeater_items({}, "images") == []
    assert parse_repeater_items({"repeaters": {"images": []}}, "images") == []
    assert parse_repeater_items({"repeaters": {"other": [{"id": "x"}]}}, "images") == []


def test_items_keep_submission_order_and_extra_fields() -> None:
    items = parse_repeater_items(
        {"repeaters": {"images": [{"id": "images-1", "caption": "a"}, {"caption": "b"}]}},
        "images",
    )

    assert [item.client_id for item in items] == ["images-1", None]
    assert items[0].to_fields(position=1) == {"caption": "a", "position": 1}
    assert items[1].to_fields(position=2) == {"caption": "b", "position": 2}


def test_numeric_client_ids_are_read_as_strings() -> None:
    item = SubmittedRepeaterItem.model_validate({"id": 1700000000})

    assert item.client_id == "1700000000"


def test_index_keyed_mapping_is_read_as_list() -> None:
    items = parse_repeater_items(
        {"repeaters": {"images": {"0": {"caption": "a"}, "1": {"caption": "b"}}}},
        "images",
    )

    assert [item.to_fields(position=1)["caption"] for item in items] == ["a", "b"]


def test_nested_repeaters_are_not_part_of_the_field_map() -> None:
    item = SubmittedRepeaterItem.model_validate(
        {"id": "tmp", "caption": "a", "repeaters": {"tags": [{"label": "x"}]}}
    )

    assert item.repeaters == {"tags": [{"label": "x"}]}
    assert item.to_fields(position=3) == {"caption": "a", "position": 3}


def test_malformed_item_raises_invalid_payload() -> None:
    with pytest.raises(InvalidPayloadError):
        parse_repeater_items({"repeaters": {"images": ["not a mapping"]}}, "images")

    with pytest.raises(InvalidPayloadError):
        parse_repeater_items({"repeaters": ["images"]}, "images")


def test_languages_follow_parent_locale_flags() -> None:
    item = SubmittedRepeaterItem.model_validate({"active": {"en": True, "fr": True}})

    languages = derive_languages(item, {"en": {"active": True}, "fr": {"active": False}})

    assert languages == [
        {"value": "en", "published": True},
        {"value": "fr", "published": False},
    ]


def test_explicit_languages_are_not_overridden() -> None:
    item = SubmittedRepeaterItem.model_validate(
        {"active": {"en": True}, "languages": [{"value": "en", "published": False}]}
    )

    assert derive_languages(item, {"en": {"active": True}}) is None


def test_no_active_map_means_no_derivation() -> None:
    item = SubmittedRepeaterItem.model_validate({"caption": "a"})

    assert derive_languages(item, {"en": {"active": True}}) is None
