"""Normalization of source text into slug base tokens."""

from __future__ import annotations

import re
import unicodedata
from typing import TYPE_CHECKING, Any

from unidecode import unidecode

if TYPE_CHECKING:
    from .backend import Backend
    from .models import SlugSpec

_SEPARATORS = re.compile(r"[^a-z0-9]+")


def normalize(raw: str | None, max_length: int | None = None) -> str:
    """Turn arbitrary text into a URL-safe base token.

    Transliterates to ASCII, lowercases, collapses every run of whitespace or
    punctuation to a single hyphen, and strips leading and trailing hyphens.
    Never fails: empty or punctuation-only input yields an empty string.

    Args:
        raw: Text to normalize. None is treated as empty.
        max_length: When set, truncate the token to at most this many
            characters, cutting at the last hyphen that fits when there is one.

    Returns:
        str: Lowercase, ASCII, hyphen-separated token.

    Examples:
        normalize("Héllo, World!")  # "hello-world"
        normalize("Straße 12")  # "strasse-12"
        normalize("   ")  # ""
    """
    if not raw:
        return ""

    # Step 1: Compose, then transliterate anything left outside ASCII
    text = unidecode(unicodedata.normalize("NFKC", raw))

    # Step 2: Lowercase and collapse separators
    token = _SEPARATORS.sub("-", text.casefold()).strip("-")

    if max_length is not None and len(token) > max_length:
        token = _truncate(token, max_length)

    return token


def _truncate(token: str, max_length: int) -> str:
    head = token[:max_length]
    if token[max_length] != "-" and "-" in head:
        head = head.rsplit("-", 1)[0]
    return head.strip("-")


def build_base(
    record: Any, spec: SlugSpec, backend: Backend, max_length: int | None = None
) -> str:
    """Build the normalized base token for a record.

    Without a custom rule, the source field values are read in declared order,
    joined with a single space, and normalized. A custom rule receives the
    record and its result is normalized the same way.

    Args:
        record: Record being slugged.
        spec: Slug settings for the record's type.
        backend: Backend used to read field values.
        max_length: Optional maximum length of the token.

    Returns:
        str: The base token, possibly empty.

    Examples:
        build_base(book, SlugSpec(fields=("title", "edition")), store)
    """
    if spec.rule is not None:
        raw = spec.rule(record)
    else:
        values = (backend.read_field(record, field) for field in spec.fields)
        raw = " ".join("" if value is None else str(value) for value in values)

    return normalize(None if raw is None else str(raw), max_length=max_length)
