from __future__ import annotations

from formsync.domain.projection import (
    FieldKey,
    ProjectedFieldSet,
    ProjectedItem,
    RepeaterEntry,
    RepeaterProjection,
)


def _item(relation: str, record_id: int, **kwargs: object) -> ProjectedItem:
    return ProjectedItem(
        relation=relation,
        record_id=record_id,
        entry=RepeaterEntry(id=f"{relation}-{record_id}", type=relation, title=relation),
        **kwargs,  # type: ignore[arg-type]
    )


def test_field_names_carry_optional_locale() -> None:
    item = _item("images", 9)

    assert item.key == "images-9"
    assert item.field_name("caption") == "blocks[images-9][caption]"
    assert item.field_name("cover", "fr") == "blocks[images-9][cover][fr]"
    assert item.child_list_name("tags") == "blocks-images-9_tags"


def test_deeply_nested_lists_are_published_per_parent_item() -> None:
    grandchild = RepeaterProjection(
        name="notes", relation="notes", items=[_item("notes", 1, fields=[("text", "n")])]
    )
    child = RepeaterProjection(
        name="tags",
        relation="tags",
        items=[_item("tags", 4, fields=[("label", "sky")], children={"notes": grandchild})],
    )
    root = RepeaterProjection(
        name="images",
        relation="images",
        items=[
            _item(
                "images",
                9,
                fields=[("caption", "Sunset")],
                medias={FieldKey("cover", "en"): ["m"]},
                children={"tags": child},
            )
        ],
    )
    fieldset = ProjectedFieldSet()
    fieldset.add(root)

    payload = fieldset.to_payload()

    assert list(payload["repeaters"]) == ["blocks-images-9_tags", "blocks-tags-4_notes", "images"]
    assert [entry["name"] for entry in payload["repeaterFields"]["images"]] == [
        "blocks[images-9][caption]",
        "blocks[tags-4][label]",
        "blocks[notes-1][text]",
    ]
    assert payload["repeaterMedias"]["images"] == {"blocks[images-9][cover][en]": ["m"]}
