"""Disambiguation of base tokens against a sibling set."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import TYPE_CHECKING

from .models import SiblingSet, SlugPattern

if TYPE_CHECKING:
    from .backend import Backend

logger = logging.getLogger(__name__)


def slug_pattern(base: str) -> SlugPattern:
    """Build the matcher for a base token and its numbered variants.

    The pattern accepts the exact base token or the token followed by a hyphen
    and one or more ASCII digits, and always matches the whole value.

    Args:
        base: Normalized base token.

    Returns:
        SlugPattern: Matcher whose first group captures the counter.

    Examples:
        slug_pattern("foo").match("foo-12")  # match, group(1) == "12"
        slug_pattern("foo").match("foo-bar")  # None
    """
    return SlugPattern(base, re.compile(rf"{re.escape(base)}(?:-([0-9]+))?"))


def counter_for(pattern: SlugPattern, value: str) -> str | None:
    """Extract the disambiguation counter of a slug.

    Counters stay digit strings so that arbitrarily long values compare and
    increment without integer conversion.

    Args:
        pattern: Matcher built by `slug_pattern`.
        value: Slug value of a sibling.

    Returns:
        str | None: The counter without leading zeros, ``"0"`` for an exact
            match, or None when `value` does not match the pattern.

    Examples:
        counter_for(slug_pattern("foo"), "foo-012")  # "12"
        counter_for(slug_pattern("foo"), "foo")  # "0"
    """
    match = pattern.match(value)
    if match is None:
        return None
    return (match.group(1) or "").lstrip("0") or "0"


def _increment(digits: str) -> str:
    stem = digits.rstrip("9")
    carried = "0" * (len(digits) - len(stem))
    if not stem:
        return "1" + carried
    return f"{stem[:-1]}{int(stem[-1]) + 1}{carried}"


def next_slug(base: str, taken: Iterable[str]) -> str:
    """Return the slug for `base` given the slugs already taken.

    Only the highest counter among matching values matters; gaps and repeated
    counters are left as they are.

    Args:
        base: Normalized base token.
        taken: Slug values of the siblings, in any order.

    Returns:
        str: `base` when nothing matches, otherwise ``base-(max + 1)``.

    Examples:
        next_slug("foo", [])  # "foo"
        next_slug("foo", ["foo"])  # "foo-1"
        next_slug("foo", ["foo", "foo-1"])  # "foo-2"
        next_slug("foo", ["foo-7", "bar"])  # "foo-8"
    """
    pattern = slug_pattern(base)
    counters = [
        counter for counter in (counter_for(pattern, value) for value in taken)
        if counter is not None
    ]
    if not counters:
        return base
    highest = max(counters, key=lambda digits: (len(digits), digits))
    return f"{base}-{_increment(highest)}"


def disambiguate(base: str, siblings: SiblingSet, name: str, backend: Backend) -> str:
    """Return the smallest free variant of `base` within a sibling set.

    Issues a single query through the backend. Query failures propagate
    unchanged.

    Args:
        base: Normalized base token.
        siblings: Sibling set from the scope resolver.
        name: Attribute holding the slug on sibling records.
        backend: Store adapter that runs the query.

    Returns:
        str: Final slug.

    Raises:
        StoreQueryError: If the backend cannot query the sibling set.
    """
    pattern = slug_pattern(base)
    taken = list(backend.matching_slugs(siblings.source, name, pattern, siblings.exclude))
    slug = next_slug(base, taken)
    logger.debug("Base %r matched %d sibling slug(s); using %r", base, len(taken), slug)
    return slug
