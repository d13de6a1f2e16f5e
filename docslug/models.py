"""Data models for docslug."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any


class ScopeStrategy(Enum):
    """How the sibling set of a record type is chosen.

    Attributes:
        ASSOCIATION: Other children of the parent referenced by a named association.
        EMBEDDED: Other embedded children of the same parent and relation.
        GLOBAL: Every persisted record sharing the type's root collection.
    """

    ASSOCIATION = auto()
    EMBEDDED = auto()
    GLOBAL = auto()


@dataclass(frozen=True)
class SlugSpec:
    """Slug settings for one record type, built once at registration.

    Attributes:
        fields: Source field names, in the order their values are joined.
        name: Attribute that stores the slug.
        rule: Callable building the base string from the record, or None to
            join the source field values.
        scope: Association that scopes uniqueness, if any.
        permanent: Whether the slug is frozen after the first generation.
        index: Whether a scoped unique index backs the slug attribute.
        strategy: Scope strategy resolved at registration.

    Examples:
        SlugSpec(fields=("title",), scope="author", strategy=ScopeStrategy.ASSOCIATION)
    """

    fields: tuple[str, ...]
    name: str = "slug"
    rule: Callable[[Any], Any] | None = None
    scope: str | None = None
    permanent: bool = False
    index: bool = False
    strategy: ScopeStrategy = ScopeStrategy.GLOBAL


@dataclass(frozen=True)
class SiblingSet:
    """Records a candidate slug must not collide with.

    Attributes:
        strategy: Strategy that produced the set.
        source: Backend-specific handle on the sibling records.
        exclude: Identity of the record being slugged, or None for a new record.
    """

    strategy: ScopeStrategy
    source: Any
    exclude: Any = None


@dataclass(frozen=True)
class SlugPattern:
    """Matcher for a base token with an optional numeric counter.

    Attributes:
        base: Base token the pattern was built from.
        regex: Compiled pattern anchored on the whole slug value; group 1 holds
            the counter digits when present.
    """

    base: str
    regex: re.Pattern[str]

    def match(self, value: str | None) -> re.Match[str] | None:
        if value is None:
            return None
        return self.regex.fullmatch(value)
