"""Casing and singularization helpers shared by the naming functions.

Every name the engine emits goes through these helpers, so they must stay
pure: same input, same output, no state.
"""

from __future__ import annotations

import re

# Irregular plural -> singular forms
_SINGULARS: dict[str, str] = {
    "people": "person",
    "children": "child",
    "men": "man",
    "women": "woman",
    "mice": "mouse",
    "geese": "goose",
    "feet": "foot",
    "teeth": "tooth",
    "indices": "index",
    "matrices": "matrix",
    "vertices": "vertex",
    "criteria": "criterion",
    "data": "data",
    "media": "media",
    "news": "news",
    "series": "series",
    "species": "species",
    "metadata": "metadata",
    "statuses": "status",
    "aliases": "alias",
    "buses": "bus",
    "analyses": "analysis",
    "menus": "menu",
    "bonuses": "bonus",
}

# Words ending in "s" that are already singular
_SINGULAR_ENDINGS = ("ss", "us", "is")


def split_words(text: str) -> list[str]:
    """Split an identifier-ish string into words.

    Breaks on any non-alphanumeric character and on camelCase boundaries:
    ``"userProfiles"``, ``"user-profiles"`` and ``"user_profiles"`` all give
    ``["user", "Profiles"]`` style pieces.
    """
    s1 = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1 \2", text)
    s2 = re.sub(r"([a-z\d])([A-Z])", r"\1 \2", s1)
    return [w for w in re.split(r"[^A-Za-z0-9]+", s2) if w]


def pascal_case(text: str) -> str:
    """Convert to PascalCase, keeping inner capitals of camelCase words."""
    return "".join(w[0].upper() + w[1:] for w in split_words(text))


def camel_case(text: str) -> str:
    """Convert to camelCase."""
    pascal = pascal_case(text)
    return pascal[:1].lower() + pascal[1:]


def capitalize(text: str) -> str:
    """Upper-case the first letter only."""
    return text[:1].upper() + text[1:]


def _singularize_word(word: str) -> str:
    lower = word.lower()
    if lower in _SINGULARS:
        singular = _SINGULARS[lower]
        return word[:1] + singular[1:] if word[:1].isupper() else singular
    if lower.endswith(_SINGULAR_ENDINGS):
        return word
    if lower.endswith("ies") and len(word) > 3:
        return word[:-3] + "y"
    if lower.endswith(("sses", "shes", "ches", "xes", "zes")):
        return word[:-2]
    if lower.endswith("s") and len(word) > 1:
        return word[:-1]
    return word


def singularize(text: str) -> str:
    """Return the singular form of a resource segment.

    Only the last word of a compound segment is changed, so
    ``"line-items"`` becomes ``"line-item"`` and ``"userProfiles"`` becomes
    ``"userProfile"``.
    """
    words = split_words(text)
    if not words:
        return text
    last = words[-1]
    idx = text.rfind(last)
    return text[:idx] + _singularize_word(last) + text[idx + len(last):]
