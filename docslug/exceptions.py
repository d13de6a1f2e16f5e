"""Package-specific exception types."""

from __future__ import annotations


class SlugError(Exception):
    """Base class for docslug errors."""


class ConfigurationError(SlugError, ValueError):
    """Raised when slug settings or a slug registration are invalid.

    Registration problems (an unknown scope association, a frozen registry)
    surface at declaration time, never while generating a slug.

    Examples:
        raise ConfigurationError("`max_retries` must be >= 0")
    """


class StoreQueryError(SlugError):
    """Raised by a backend when a sibling query cannot be executed.

    The slug core never catches this error.
    """


class SlugConflictError(SlugError):
    """Raised by a backend when a store-level unique index rejects a slug.

    Args:
        name: Attribute holding the slug.
        value: Slug value that collided.
    """

    def __init__(self, name: str, value: str):
        self.name = name
        self.value = value
        super().__init__(f"Slug {value!r} already taken for `{name}`")


class LookupNotFound(SlugError, LookupError):
    """Raised when a lookup by slug finds no record.

    Args:
        record_type: Type that was searched.
        value: Slug value that was looked up.
    """

    def __init__(self, record_type: type, value: str):
        self.record_type = record_type
        self.value = value
        super().__init__(f"No {record_type.__name__} found with slug {value!r}")
