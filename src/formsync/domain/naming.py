"""Name inflection used to infer relations and entity types from repeater names."""

from __future__ import annotations

import re
from typing import Final

_WORD_SEPARATORS = re.compile(r"[-_\s]+")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

_UNCOUNTABLE: Final[frozenset[str]] = frozenset(
    {"data", "equipment", "information", "media", "metadata", "news", "series", "species"}
)
_IRREGULAR: Final[dict[str, str]] = {
    "children": "child",
    "feet": "foot",
    "geese": "goose",
    "men": "man",
    "mice": "mouse",
    "people": "person",
    "teeth": "tooth",
    "women": "woman",
}
# ordered: first match wins
_SINGULAR_RULES: Final[tuple[tuple[re.Pattern[str], str], ...]] = (
    (re.compile(r"(quiz)zes$", re.IGNORECASE), r"\1"),
    (re.compile(r"(matr|vert|ind)ices$", re.IGNORECASE), r"\1ix"),
    (re.compile(r"(alias|status|bus)es$", re.IGNORECASE), r"\1"),
    (re.compile(r"(analy|diagno|parenthe|progno|synop|the)ses$", re.IGNORECASE), r"\1sis"),
    (re.compile(r"(x|ch|ss|sh)es$", re.IGNORECASE), r"\1"),
    (re.compile(r"(shoe|movie)s$", re.IGNORECASE), r"\1"),
    (re.compile(r"([^aeiouy]|qu)ies$", re.IGNORECASE), r"\1y"),
    (re.compile(r"^(li|wi|kni)ves$", re.IGNORECASE), r"\1fe"),
    (re.compile(r"([lr])ves$", re.IGNORECASE), r"\1f"),
    (re.compile(r"(ss)$", re.IGNORECASE), r"\1"),
    (re.compile(r"(us)$", re.IGNORECASE), r"\1"),
    (re.compile(r"s$", re.IGNORECASE), ""),
)


def _words(value: str) -> list[str]:
    spaced = _CAMEL_BOUNDARY.sub(" ", value)
    return [word for word in _WORD_SEPARATORS.split(spaced) if word]


def studly(value: str) -> str:
    """``article_block`` -> ``ArticleBlock``."""

    return "".join(word[:1].upper() + word[1:] for word in _words(value))


def camel(value: str) -> str:
    """``article_block`` -> ``articleBlock``."""

    studly_value = studly(value)
    return studly_value[:1].lower() + studly_value[1:]


def snake(value: str) -> str:
    """``ArticleBlock`` -> ``article_block``."""

    return "_".join(word.lower() for word in _words(value))


def _singular_word(word: str) -> str:
    lowered = word.lower()
    if lowered in _UNCOUNTABLE:
        return word
    if lowered in _IRREGULAR:
        singular = _IRREGULAR[lowered]
        return singular.capitalize() if word[:1].isupper() else singular
    for pattern, replacement in _SINGULAR_RULES:
        if pattern.search(word):
            return pattern.sub(replacement, word, count=1)
    return word


def singular(value: str) -> str:
    """Singularise the last word of ``value``, keeping the separators of the rest."""

    match = re.search(r"[A-Za-z]+$", value)
    if match is None:
        return value
    # a camel-case tail like "ArticleImages" only singularises its last hump
    tail = match.group(0)
    humps = _CAMEL_BOUNDARY.split(tail)
    humps[-1] = _singular_word(humps[-1])
    return value[: match.start()] + "".join(humps)


def foreign_key_for(entity_type: str) -> str:
    """Conventional foreign key column for ``entity_type`` rows (``Article`` -> ``article_id``)."""

    return f"{snake(entity_type)}_id"
