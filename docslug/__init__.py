"""
docslug: unique, URL-safe slugs for stored records.

Slugs are derived from one or more source fields and kept unique among a
record's siblings: the whole collection, the other children of a referenced
parent, or the other embedded children of the same parent.

Library Usage:
    from docslug import MemoryStore, Document, Reference, SlugRegistry, Slugger

    class Author(Document):
        pass

    class Book(Document):
        references = {"author": Reference(Author)}

    store = MemoryStore()
    registry = SlugRegistry(store)
    registry.register(Author, "name")
    registry.register(Book, "title", scope="author")
    registry.freeze()

    slugger = Slugger(registry)
    author = Author(name="Herman Melville")
    slugger.save(author)
    slugger.to_param(author)  # "herman-melville"

CLI Usage:
    docslug normalize "Héllo, World!"
"""

from .config import SlugConfig, build_config, load_config
from .exceptions import (
    ConfigurationError,
    LookupNotFound,
    SlugConflictError,
    SlugError,
    StoreQueryError,
)
from .memory import Document, MemoryStore, Reference
from .models import ScopeStrategy, SiblingSet, SlugPattern, SlugSpec
from .normalize import build_base, normalize
from .registry import SlugRegistry
from .scope import resolve_scope, resolve_strategy
from .slugger import (
    Slugger,
    find_by_slug,
    find_by_slug_or_fail,
    generate_slug,
    maybe_generate_slug,
    reslug,
)
from .uniqueness import disambiguate, next_slug, slug_pattern

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "generate_slug",
    "maybe_generate_slug",
    "reslug",
    "find_by_slug",
    "find_by_slug_or_fail",
    "normalize",
    "build_base",
    "resolve_scope",
    "resolve_strategy",
    "disambiguate",
    "next_slug",
    "slug_pattern",
    "Slugger",
    "SlugRegistry",
    # Data models
    "SlugSpec",
    "SiblingSet",
    "SlugPattern",
    "ScopeStrategy",
    # Backends
    "Document",
    "MemoryStore",
    "Reference",
    # Configuration
    "SlugConfig",
    "build_config",
    "load_config",
    # Exceptions
    "SlugError",
    "ConfigurationError",
    "StoreQueryError",
    "SlugConflictError",
    "LookupNotFound",
    # Version
    "__version__",
]
