"""Resolution of the sibling set a slug must be unique within."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .exceptions import ConfigurationError
from .models import ScopeStrategy, SiblingSet, SlugSpec

if TYPE_CHECKING:
    from .backend import Backend

logger = logging.getLogger(__name__)


def resolve_strategy(record_type: type, scope: str | None, backend: Backend) -> ScopeStrategy:
    """Choose the scope strategy for a record type at registration time.

    An explicit scope wins, then embedding, then the global collection.

    Args:
        record_type: Type being registered.
        scope: Association name that scopes uniqueness, if any.
        backend: Store adapter describing the type.

    Returns:
        ScopeStrategy: Strategy used for every generation on this type.

    Raises:
        ConfigurationError: If `scope` is not an association of `record_type`.

    Examples:
        resolve_strategy(Book, "author", store)  # ScopeStrategy.ASSOCIATION
    """
    if scope is not None:
        if scope not in backend.association_names(record_type):
            raise ConfigurationError(
                f"`{scope}` is not an association of {record_type.__name__}"
            )
        return ScopeStrategy.ASSOCIATION
    if backend.is_embedded(record_type):
        return ScopeStrategy.EMBEDDED
    return ScopeStrategy.GLOBAL


def root_type(record: Any, backend: Backend) -> type:
    """Return the top of the record's inheritance chain within its collection."""
    return backend.root_type(type(record))


def resolve_scope(record: Any, spec: SlugSpec, backend: Backend) -> SiblingSet:
    """Build the sibling set for one generation call.

    An association scope whose parent is missing or unsaved falls back to the
    global collection. A detached embedded record has no siblings.

    Args:
        record: Record being slugged.
        spec: Slug settings for the record's type.
        backend: Store adapter.

    Returns:
        SiblingSet: Siblings plus the record's own identity to exclude.
    """
    exclude = backend.identity(record)

    if spec.strategy is ScopeStrategy.ASSOCIATION:
        source = backend.association_siblings(record, spec.scope)
        if source is not None:
            return SiblingSet(ScopeStrategy.ASSOCIATION, source, exclude)
        logger.debug(
            "Association `%s` of %s is unresolved; falling back to global scope",
            spec.scope,
            type(record).__name__,
        )
    elif spec.strategy is ScopeStrategy.EMBEDDED:
        return SiblingSet(ScopeStrategy.EMBEDDED, backend.embedded_siblings(record), exclude)

    source = backend.global_siblings(root_type(record, backend))
    return SiblingSet(ScopeStrategy.GLOBAL, source, exclude)
