"""Process-local document store implementing the slug backend."""

from __future__ import annotations

import itertools
from collections.abc import Callable, Collection, Iterable, Iterator, Mapping
from dataclasses import dataclass
from functools import partial
from typing import Any, ClassVar

from .exceptions import SlugConflictError
from .models import ScopeStrategy, SlugPattern

_ids = itertools.count(1)

_INTERNAL = frozenset({"id", "new_record"})


@dataclass(frozen=True)
class Reference:
    """Child-to-parent reference held in an attribute of the child.

    Attributes:
        parent_type: Type of the referenced parent.
        inverse: Name of the parent-side collection holding the children.
            Every child type declaring the same inverse shares it. Without one,
            the children are the child's own root collection.
    """

    parent_type: type
    inverse: str | None = None


class Document:
    """Base class for documents kept by a `MemoryStore`.

    Attributes are free-form keyword values tracked against the last saved
    snapshot. Subclasses sharing a non-`Document` ancestor share its
    collection.

    Attributes:
        embedded: Whether documents of this type live inside a parent document.
        references: Reference associations keyed by the attribute holding the parent.

    Examples:
        class Book(Document):
            references = {"author": Reference(Author)}

        book = Book(title="Moby Dick", author=melville)
        book.title  # "Moby Dick"
    """

    embedded: ClassVar[bool] = False
    references: ClassVar[Mapping[str, Reference]] = {}

    def __init__(self, **attributes: Any):
        object.__setattr__(self, "id", next(_ids))
        object.__setattr__(self, "new_record", True)
        object.__setattr__(self, "_attributes", dict(attributes))
        object.__setattr__(self, "_saved", {})
        object.__setattr__(self, "_parent", None)
        object.__setattr__(self, "_relation", None)
        object.__setattr__(self, "_children", {})

    def __getattr__(self, name: str) -> Any:
        try:
            return self.__dict__["_attributes"][name]
        except KeyError:
            raise AttributeError(name) from None

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_") or name in _INTERNAL:
            object.__setattr__(self, name, value)
        else:
            self._attributes[name] = value

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id} {self._attributes!r}>"

    def read_attribute(self, name: str) -> Any:
        return self._attributes.get(name)

    def write_attribute(self, name: str, value: Any) -> None:
        self._attributes[name] = value

    def attribute_changed(self, name: str) -> bool:
        return self._attributes.get(name) != self._saved.get(name)

    @property
    def parent(self) -> Document | None:
        return self._parent

    def embedded_children(self, relation: str) -> list[Document]:
        return self._children.setdefault(relation, [])


class MemoryStore:
    """In-memory store of documents grouped by root collection.

    Examples:
        store = MemoryStore()
        store.save(Author(name="Herman Melville"))
    """

    def __init__(self):
        self._collections: dict[type, dict[int, Document]] = {}
        self._indexes: list[tuple[type, str, str | None]] = []

    # Store operations

    def save(self, record: Document) -> None:
        if record.embedded:
            if record.parent is None:
                raise ValueError(f"Embedded {type(record).__name__} has no parent")
        else:
            self._check_references(record)
            self._check_indexes(record)
            self._collections.setdefault(self.root_type(type(record)), {})[record.id] = record
        self._mark_persisted(record)

    def embed(self, parent: Document, relation: str, child: Document) -> Document:
        """Attach an embedded document to `parent` under `relation`."""
        if not child.embedded:
            raise TypeError(f"{type(child).__name__} is not an embedded document")
        child._parent = parent
        child._relation = relation
        parent.embedded_children(relation).append(child)
        return child

    def all(self, record_type: type) -> list[Document]:
        collection = self._collections.get(self.root_type(record_type), {})
        return [doc for doc in collection.values() if isinstance(doc, record_type)]

    def children(self, parent: Document, record_type: type, reference: str) -> list[Document]:
        """Return persisted documents of `record_type` referencing `parent`."""
        return [
            doc
            for doc in self._collections.get(self.root_type(record_type), {}).values()
            if _same(doc.read_attribute(reference), parent)
        ]

    def inverse_children(self, parent: Document, inverse: str) -> list[Document]:
        """Return persisted documents held in the `inverse` collection of `parent`."""
        return [
            doc
            for collection in self._collections.values()
            for doc in collection.values()
            if any(
                reference.inverse == inverse and _same(doc.read_attribute(name), parent)
                for name, reference in doc.references.items()
            )
        ]

    def _check_references(self, record: Document) -> None:
        for name, reference in record.references.items():
            parent = record.read_attribute(name)
            if parent is not None and not isinstance(parent, reference.parent_type):
                raise TypeError(
                    f"`{name}` of {type(record).__name__} must reference "
                    f"{reference.parent_type.__name__}"
                )

    def _check_indexes(self, record: Document) -> None:
        root = self.root_type(type(record))
        for index_root, name, scope in self._indexes:
            if index_root is not root:
                continue
            value = record.read_attribute(name)
            if value is None:
                continue
            for other in self._collections.get(root, {}).values():
                if other.id == record.id or other.read_attribute(name) != value:
                    continue
                if scope is None or _same(
                    other.read_attribute(scope), record.read_attribute(scope)
                ):
                    raise SlugConflictError(name, value)

    def _mark_persisted(self, record: Document) -> None:
        record._saved = dict(record._attributes)
        record.new_record = False
        for children in record._children.values():
            for child in children:
                self._mark_persisted(child)

    # Backend protocol

    def identity(self, record: Document) -> int:
        return record.id

    def is_new(self, record: Document) -> bool:
        return record.new_record

    def read_field(self, record: Document, name: str) -> Any:
        return record.read_attribute(name)

    def field_changed(self, record: Document, name: str) -> bool:
        return record.attribute_changed(name)

    def write_field(self, record: Document, name: str, value: str) -> None:
        record.write_attribute(name, value)

    def association_names(self, record_type: type) -> Collection[str]:
        return getattr(record_type, "references", {}).keys()

    def is_embedded(self, record_type: type) -> bool:
        return bool(getattr(record_type, "embedded", False))

    def root_type(self, record_type: type) -> type:
        for klass in reversed(record_type.__mro__):
            if klass is not Document and issubclass(klass, Document):
                return klass
        return record_type

    def association_siblings(
        self, record: Document, scope: str
    ) -> Callable[[], Iterable[Document]] | None:
        parent = record.read_attribute(scope)
        if parent is None or parent.new_record:
            return None
        inverse = type(record).references[scope].inverse
        if inverse is not None:
            return partial(self.inverse_children, parent, inverse)
        return partial(self.children, parent, self.root_type(type(record)), scope)

    def embedded_siblings(self, record: Document) -> Callable[[], Iterable[Document]]:
        if record.parent is None:
            return list
        return partial(record.parent.embedded_children, record._relation)

    def global_siblings(self, record_type: type) -> Callable[[], Iterable[Document]]:
        return partial(self.all, record_type)

    def matching_slugs(
        self,
        source: Callable[[], Iterable[Document]],
        name: str,
        pattern: SlugPattern,
        exclude: Any,
    ) -> Iterator[str]:
        for doc in source():
            if doc.id == exclude:
                continue
            value = doc.read_attribute(name)
            if pattern.match(value):
                yield value

    def find_one(self, record_type: type, name: str, value: str) -> Document | None:
        for doc in self.all(record_type):
            if doc.read_attribute(name) == value:
                return doc
        return None

    def ensure_index(
        self, record_type: type, name: str, strategy: ScopeStrategy, scope: str | None
    ) -> None:
        index = (
            self.root_type(record_type),
            name,
            scope if strategy is ScopeStrategy.ASSOCIATION else None,
        )
        if index not in self._indexes:
            self._indexes.append(index)


def _same(left: Any, right: Any) -> bool:
    if left is None or right is None:
        return left is right
    return getattr(left, "id", left) == getattr(right, "id", right)
