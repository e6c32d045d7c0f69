from __future__ import annotations

import re
from enum import Enum

"""Column-name casing policies.

A bindable field without an explicit column name derives one from its own
identifier. The owning record type picks the policy; ``normalize`` is pure and
deterministic so the derived name never changes between rows.
"""

__all__ = [
    "Case",
    "normalize",
    "split_words",
]

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_SEPARATORS = re.compile(r"[_\-]")
_WHITESPACE = re.compile(r"\s+")


class Case(Enum):
    """Casing policy used to derive a column name from a field identifier."""
    NONE = "none"
    PASCAL = "pascal"
    TITLE = "title"
    SNAKE = "snake"
    NICIFIED = "nicified"

    @classmethod
    def parse(cls, value: str | Case | None) -> Case:
        """Accept a config string (case-insensitive) or an existing member."""
        if value is None:
            return cls.NONE
        if isinstance(value, Case):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = "|".join(m.value for m in cls)
            raise ValueError(f"unknown casing policy '{value}' (expected {allowed})") from None


def split_words(identifier: str) -> list[str]:
    """Split camelCase / PascalCase / snake_case / kebab-case into words."""
    if not identifier:
        return []
    result = _CAMEL_BOUNDARY.sub(r"\1 \2", identifier)
    result = _SEPARATORS.sub(" ", result)
    result = _WHITESPACE.sub(" ", result).strip()
    return result.split(" ") if result else []


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def _nicify(identifier: str) -> str:
    name = identifier
    if name.startswith("m_"):
        name = name[2:]
    name = name.lstrip("_")
    if not name:
        return ""
    name = _ACRONYM_BOUNDARY.sub(r"\1 \2", name)
    name = _CAMEL_BOUNDARY.sub(r"\1 \2", name)
    name = _SEPARATORS.sub(" ", name)
    name = _WHITESPACE.sub(" ", name).strip()
    return name[:1].upper() + name[1:]


def normalize(identifier: str, policy: Case | str = Case.NONE) -> str:
    """Map ``identifier`` to its column-name spelling under ``policy``.

    Examples:
        >>> normalize("maxHealth", Case.PASCAL)
        'MaxHealth'
        >>> normalize("max_health", Case.TITLE)
        'Max Health'
        >>> normalize("MaxHealth", Case.SNAKE)
        'max_health'
        >>> normalize("m_HTMLParser", Case.NICIFIED)
        'HTML Parser'
    """
    policy = Case.parse(policy)
    if policy is Case.NONE:
        return identifier
    if policy is Case.NICIFIED:
        return _nicify(identifier)

    words = split_words(identifier)
    if policy is Case.PASCAL:
        return "".join(_capitalize(w) for w in words)
    if policy is Case.TITLE:
        return " ".join(_capitalize(w) for w in words)
    # Case.SNAKE
    return "_".join(w.lower() for w in words)
