from __future__ import annotations

import pytest

from formsync.domain.naming import camel, foreign_key_for, singular, snake, studly


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("article_repeater", "ArticleRepeater"),
        ("article-repeater", "ArticleRepeater"),
        ("articleRepeater", "ArticleRepeater"),
        ("images", "Images"),
    ],
)
def test_studly(value: str, expected: str) -> None:
    assert studly(value) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("article_repeater", "articleRepeater"),
        ("user_group", "userGroup"),
        ("images", "images"),
        ("ContactOffice", "contactOffice"),
    ],
)
def test_camel(value: str, expected: str) -> None:
    assert camel(value) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("images", "image"),
        ("article_repeaters", "article_repeater"),
        ("categories", "category"),
        ("boxes", "box"),
        ("statuses", "status"),
        ("movies", "movie"),
        ("knives", "knife"),
        ("shelves", "shelf"),
        ("people", "person"),
        ("news", "news"),
        ("ArticleImages", "ArticleImage"),
        ("class", "class"),
    ],
)
def test_singular(value: str, expected: str) -> None:
    assert singular(value) == expected


def test_snake_and_foreign_key() -> None:
    assert snake("ArticleBlock") == "article_block"
    assert foreign_key_for("Article") == "article_id"
    assert foreign_key_for("ArticleBlock") == "article_block_id"
