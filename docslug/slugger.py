"""Slug generation entry points and lookups."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .exceptions import LookupNotFound, SlugConflictError
from .normalize import build_base
from .scope import resolve_scope
from .uniqueness import disambiguate

if TYPE_CHECKING:
    from .backend import Backend
    from .models import SlugSpec
    from .registry import SlugRegistry

logger = logging.getLogger(__name__)


def generate_slug(
    record: Any, spec: SlugSpec, backend: Backend, max_length: int | None = None
) -> str:
    """Compute a unique slug for a record and store it on the record.

    Normalizes the base, resolves the sibling set, disambiguates against it and
    writes the result to the slug attribute. The record is not persisted.

    Args:
        record: Record being slugged.
        spec: Slug settings for the record's type.
        backend: Store adapter.
        max_length: Optional maximum length of the base token.

    Returns:
        str: The slug written to the record.

    Raises:
        StoreQueryError: If the sibling query fails.

    Examples:
        generate_slug(book, registry.spec_for(Book), store)  # "moby-dick-1"
    """
    base = build_base(record, spec, backend, max_length=max_length)
    siblings = resolve_scope(record, spec, backend)
    slug = disambiguate(base, siblings, spec.name, backend)
    backend.write_field(record, spec.name, slug)
    return slug


def needs_slug(record: Any, spec: SlugSpec, backend: Backend) -> bool:
    """Return True when a record's slug has to be (re)generated.

    New records always need one. Permanent slugs never change afterwards;
    other slugs follow changes to any source field.
    """
    if backend.is_new(record):
        return True
    if spec.permanent:
        return False
    return any(backend.field_changed(record, field) for field in spec.fields)


def maybe_generate_slug(
    record: Any, spec: SlugSpec, backend: Backend, max_length: int | None = None
) -> str | None:
    """Generate a slug only when the record is new or its sources changed.

    Returns:
        str | None: The new slug, or None when generation was skipped.
    """
    if not needs_slug(record, spec, backend):
        logger.debug("Keeping slug of %s", type(record).__name__)
        return None
    return generate_slug(record, spec, backend, max_length=max_length)


def reslug(
    record: Any, spec: SlugSpec, backend: Backend, max_length: int | None = None
) -> str:
    """Force regeneration and persist the record, ignoring permanence.

    Meant for backfilling slugs on existing collections.
    """
    slug = generate_slug(record, spec, backend, max_length=max_length)
    backend.save(record)
    return slug


def find_by_slug(record_type: type, value: str, spec: SlugSpec, backend: Backend) -> Any | None:
    """Return the first record of `record_type` whose slug is `value`, if any."""
    return backend.find_one(record_type, spec.name, value)


def find_by_slug_or_fail(record_type: type, value: str, spec: SlugSpec, backend: Backend) -> Any:
    """Return the record of `record_type` whose slug is `value`.

    Raises:
        LookupNotFound: If no record holds that slug.
    """
    record = find_by_slug(record_type, value, spec, backend)
    if record is None:
        raise LookupNotFound(record_type, value)
    return record


class Slugger:
    """Slug operations bound to a registry and its backend.

    Args:
        registry: Registry holding the spec of every slugged type.

    Examples:
        slugger = Slugger(registry)
        slugger.save(Book(title="Moby Dick", author=melville))
        slugger.find_by_slug_or_fail(Book, "moby-dick")
    """

    def __init__(self, registry: SlugRegistry):
        self.registry = registry
        self.backend = registry.backend
        self.config = registry.config

    def generate(self, record: Any) -> str:
        spec = self.registry.spec_for(type(record))
        return generate_slug(record, spec, self.backend, max_length=self.config.max_length)

    def maybe_generate(self, record: Any) -> str | None:
        spec = self.registry.spec_for(type(record))
        return maybe_generate_slug(record, spec, self.backend, max_length=self.config.max_length)

    def reslug(self, record: Any) -> str:
        spec = self.registry.spec_for(type(record))
        return reslug(record, spec, self.backend, max_length=self.config.max_length)

    def save(self, record: Any, retries: int | None = None) -> None:
        """Generate a slug when needed and persist the record.

        A unique index conflict reported by the backend triggers a forced
        regeneration and another save, up to `retries` times. Without a unique
        index, two concurrent saves can still produce the same slug.

        Args:
            record: Record to persist.
            retries: Conflict retries; defaults to the configured `max_retries`.

        Raises:
            SlugConflictError: If the slug still conflicts after the last retry.
            StoreQueryError: If a sibling query fails.
        """
        retries = self.config.max_retries if retries is None else retries
        self.maybe_generate(record)

        attempt = 0
        while True:
            try:
                self.backend.save(record)
                return
            except SlugConflictError as error:
                if attempt >= retries:
                    raise
                attempt += 1
                logger.warning(
                    "Slug %r conflicted on save; regenerating (attempt %d of %d)",
                    error.value,
                    attempt,
                    retries,
                )
                self.generate(record)

    def find_by_slug(self, record_type: type, value: str) -> Any | None:
        spec = self.registry.spec_for(record_type)
        return find_by_slug(record_type, value, spec, self.backend)

    def find_by_slug_or_fail(self, record_type: type, value: str) -> Any:
        spec = self.registry.spec_for(record_type)
        return find_by_slug_or_fail(record_type, value, spec, self.backend)

    def to_param(self, record: Any) -> Any:
        """Return the stored slug, for use in URLs."""
        spec = self.registry.spec_for(type(record))
        return self.backend.read_field(record, spec.name)
