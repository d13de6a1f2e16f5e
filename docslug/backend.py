"""Capabilities the slug core needs from a record store."""

from __future__ import annotations

from collections.abc import Collection, Iterable
from typing import Any, Protocol

from .models import ScopeStrategy, SlugPattern


class Backend(Protocol):
    """Store adapter consumed by the slug core.

    A backend owns field access, change tracking, association lookups, and
    sibling queries. Sibling sources returned by the ``*_siblings`` methods are
    opaque to the core and only handed back to `matching_slugs`.
    """

    def identity(self, record: Any) -> Any:
        """Return the stable identity of a record, or None when unsaved."""

    def is_new(self, record: Any) -> bool:
        """Return True when the record has never been persisted."""

    def read_field(self, record: Any, name: str) -> Any: ...

    def field_changed(self, record: Any, name: str) -> bool:
        """Return True when a field differs from its last persisted value."""

    def write_field(self, record: Any, name: str, value: str) -> None: ...

    def association_names(self, record_type: type) -> Collection[str]:
        """Return the associations usable as a slug scope for a type."""

    def is_embedded(self, record_type: type) -> bool: ...

    def root_type(self, record_type: type) -> type:
        """Return the top type sharing the record type's collection."""

    def association_siblings(self, record: Any, scope: str) -> Any | None:
        """Return the parent's children through `scope`, or None when unresolvable."""

    def embedded_siblings(self, record: Any) -> Any:
        """Return the parent's embedded children; empty when the record is detached."""

    def global_siblings(self, record_type: type) -> Any: ...

    def matching_slugs(
        self, source: Any, name: str, pattern: SlugPattern, exclude: Any
    ) -> Iterable[str]:
        """Return slug values in `source` matching `pattern`, skipping `exclude`.

        Raises:
            StoreQueryError: If the store cannot run the query.
        """

    def find_one(self, record_type: type, name: str, value: str) -> Any | None: ...

    def save(self, record: Any) -> None:
        """Persist a record.

        A rejected save leaves the record's unsaved field values in place.

        Raises:
            SlugConflictError: If a unique slug index rejects the record.
        """

    def ensure_index(
        self, record_type: type, name: str, strategy: ScopeStrategy, scope: str | None
    ) -> None:
        """Back the slug attribute with a unique index scoped like the sibling set."""
