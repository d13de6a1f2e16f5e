"""SQLAlchemy ORM adapter for the slug backend."""

from __future__ import annotations

import logging
import re
from typing import Any, NamedTuple

from sqlalchemy import ColumnElement, Index, false, inspect, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import RelationshipDirection, Session

from .exceptions import SlugConflictError, StoreQueryError
from .models import ScopeStrategy, SlugPattern

logger = logging.getLogger(__name__)

_SQLITE_UNIQUE_FAILED = "UNIQUE constraint failed: "


class _Siblings(NamedTuple):
    entity: type
    criteria: tuple[ColumnElement[bool], ...] = ()


class _UniqueSlugIndex(NamedTuple):
    name: str
    columns: frozenset[str]
    attribute: str

    def violated_by(self, message: str) -> bool:
        if re.search(rf"\b{re.escape(self.name)}\b", message):
            return True
        # SQLite names the columns rather than the index
        if message.startswith(_SQLITE_UNIQUE_FAILED):
            failed = message[len(_SQLITE_UNIQUE_FAILED):].split(",")
            return {column.strip() for column in failed} == self.columns
        return False


class SQLAlchemyBackend:
    """Slug backend over mapped classes of a SQLAlchemy `Session`.

    Scopes must be many-to-one relationships. Single-table and joined-table
    inheritance share the base mapper's rows as the global sibling set.
    Mapped classes are never embedded.

    Saves run inside a SAVEPOINT. On SQLite the pysqlite driver needs the
    SAVEPOINT recipe from the SQLAlchemy dialect documentation.

    Args:
        session: Session used for sibling queries and saves.

    Examples:
        backend = SQLAlchemyBackend(session)
        registry = SlugRegistry(backend)
        registry.register(Title, "title", index=True)
        Base.metadata.create_all(engine)
    """

    def __init__(self, session: Session):
        self.session = session
        self._indexed: dict[type, list[_UniqueSlugIndex]] = {}

    def identity(self, record: Any) -> tuple[Any, ...] | None:
        return inspect(record).identity

    def is_new(self, record: Any) -> bool:
        return not inspect(record).has_identity

    def read_field(self, record: Any, name: str) -> Any:
        return getattr(record, name)

    def field_changed(self, record: Any, name: str) -> bool:
        return inspect(record).attrs[name].history.has_changes()

    def write_field(self, record: Any, name: str, value: str) -> None:
        setattr(record, name, value)

    def association_names(self, record_type: type) -> list[str]:
        return [
            relationship.key
            for relationship in inspect(record_type).relationships
            if relationship.direction is RelationshipDirection.MANYTOONE
        ]

    def is_embedded(self, record_type: type) -> bool:
        return False

    def root_type(self, record_type: type) -> type:
        return inspect(record_type).base_mapper.class_

    def association_siblings(self, record: Any, scope: str) -> _Siblings | None:
        parent = getattr(record, scope)
        if parent is None or not inspect(parent).has_identity:
            return None
        root = self.root_type(type(record))
        return _Siblings(root, (getattr(type(record), scope) == parent,))

    def embedded_siblings(self, record: Any) -> _Siblings:
        return _Siblings(type(record), (false(),))

    def global_siblings(self, record_type: type) -> _Siblings:
        return _Siblings(record_type)

    def matching_slugs(
        self, source: _Siblings, name: str, pattern: SlugPattern, exclude: Any
    ) -> list[str]:
        column = getattr(source.entity, name)
        statement = select(column).where(
            *source.criteria,
            or_(column == pattern.base, column.startswith(f"{pattern.base}-", autoescape=True)),
        )
        if exclude is not None:
            primary_key = inspect(source.entity).primary_key
            statement = statement.where(
                or_(*(key != value for key, value in zip(primary_key, exclude)))
            )

        try:
            # The record being slugged may be pending; it must not be flushed yet
            with self.session.no_autoflush:
                values = self.session.scalars(statement).all()
        except SQLAlchemyError as error:
            raise StoreQueryError(
                f"Sibling query on {source.entity.__name__} failed: {error}"
            ) from error

        # LIKE is case-insensitive on some databases; the pattern is exact
        return [value for value in values if pattern.match(value)]

    def find_one(self, record_type: type, name: str, value: str) -> Any | None:
        statement = select(record_type).where(getattr(record_type, name) == value).limit(1)
        return self.session.scalars(statement).first()

    def save(self, record: Any) -> None:
        """Flush the record inside a SAVEPOINT.

        Other pending changes of the session are flushed first, outside the
        SAVEPOINT. When the record's flush fails, only the SAVEPOINT is rolled
        back: rows flushed earlier in the transaction survive, and the
        record's unsaved edits are written back onto it. A new record is left
        outside the session until the next save.

        Raises:
            SlugConflictError: If a unique slug index declared through
                `ensure_index` rejected the record.
            IntegrityError: If any other constraint rejected the record.
        """
        edits = _pending_edits(record)
        if record in self.session:
            self._detach(record)

        try:
            with self.session.begin_nested():
                self.session.add(record)
        except IntegrityError as error:
            for key, value in edits.items():
                setattr(record, key, value)
            name = self._conflicting_attribute(type(record), error)
            if name is None:
                raise
            raise SlugConflictError(name, getattr(record, name)) from error

    def _detach(self, record: Any) -> None:
        # Keeps the record's rows out of the flush that opens the SAVEPOINT
        state = inspect(record)
        for obj, _, related, _ in state.mapper.cascade_iterator("save-update", state):
            if related.pending:
                self.session.expunge(obj)
        self.session.expunge(record)

    def _conflicting_attribute(self, record_type: type, error: IntegrityError) -> str | None:
        message = str(error.orig)
        for index in self._indexed.get(self.root_type(record_type), ()):
            if index.violated_by(message):
                return index.attribute
        return None

    def ensure_index(
        self, record_type: type, name: str, strategy: ScopeStrategy, scope: str | None
    ) -> None:
        mapper = inspect(record_type)
        slug_column = mapper.columns[name]
        columns = []
        if strategy is ScopeStrategy.ASSOCIATION:
            relationship = mapper.relationships[scope]
            columns.extend(sorted(relationship.local_columns, key=lambda column: column.name))
        columns.append(slug_column)

        table = slug_column.table
        index_name = f"uq_{table.name}_{slug_column.name}"
        if not any(index.name == index_name for index in table.indexes):
            Index(index_name, *columns, unique=True)
            logger.debug("Declared unique index %s", index_name)

        index = _UniqueSlugIndex(
            index_name,
            frozenset(f"{table.name}.{column.name}" for column in columns),
            name,
        )
        indexed = self._indexed.setdefault(self.root_type(record_type), [])
        if index not in indexed:
            indexed.append(index)


def _pending_edits(record: Any) -> dict[str, Any]:
    state = inspect(record)
    keys = [prop.key for prop in state.mapper.column_attrs]
    keys.extend(rel.key for rel in state.mapper.relationships if not rel.uselist)
    return {key: state.attrs[key].value for key in keys if state.attrs[key].history.has_changes()}
