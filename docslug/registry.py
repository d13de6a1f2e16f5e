"""Registration of slug settings per record type."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from .config import SlugConfig, validate_config
from .exceptions import ConfigurationError
from .models import ScopeStrategy, SlugSpec
from .scope import resolve_strategy

if TYPE_CHECKING:
    from .backend import Backend

logger = logging.getLogger(__name__)


class SlugRegistry:
    """Mapping from record type to its `SlugSpec`.

    Populate it at startup, then call `freeze` so it stays read-only.

    Args:
        backend: Store adapter used to validate scopes and create indexes.
        config: Defaults for options a registration leaves out.

    Examples:
        registry = SlugRegistry(MemoryStore())
        registry.register(Book, "title", scope="author")
        registry.freeze()
    """

    def __init__(self, backend: Backend, config: SlugConfig | None = None):
        self.backend = backend
        self.config = config or SlugConfig()
        validate_config(self.config)
        self._specs: dict[type, SlugSpec] = {}
        self._frozen = False

    def register(
        self,
        record_type: type,
        *fields: str,
        name: str | None = None,
        scope: str | None = None,
        permanent: bool | None = None,
        index: bool | None = None,
        rule: Callable[[Any], Any] | None = None,
    ) -> SlugSpec:
        """Declare how records of `record_type` are slugged.

        Args:
            record_type: Type whose records receive slugs.
            fields: Source field names, joined in this order. Also the fields
                watched for changes when a custom `rule` builds the base.
            name: Attribute that stores the slug.
            scope: Association that scopes uniqueness.
            permanent: Freeze the slug after the first generation.
            index: Back the slug with a unique index scoped like its siblings.
                Ignored for embedded types.
            rule: Callable receiving the record and returning the base string.

        Returns:
            SlugSpec: The registered settings.

        Raises:
            ConfigurationError: If the registry is frozen, the type is already
                registered, neither fields nor a rule are given, or `scope` is
                not an association of the type.
        """
        if self._frozen:
            raise ConfigurationError("Slug registry is frozen")
        if record_type in self._specs:
            raise ConfigurationError(f"{record_type.__name__} is already registered")
        if not fields and rule is None:
            raise ConfigurationError(
                f"{record_type.__name__} needs at least one source field or a rule"
            )

        strategy = resolve_strategy(record_type, scope, self.backend)
        spec = SlugSpec(
            fields=tuple(fields),
            name=name or self.config.slug_field,
            rule=rule,
            scope=scope,
            permanent=self.config.permanent if permanent is None else permanent,
            index=self.config.index if index is None else index,
            strategy=strategy,
        )

        if spec.index and strategy is not ScopeStrategy.EMBEDDED:
            self.backend.ensure_index(record_type, spec.name, strategy, scope)

        self._specs[record_type] = spec
        logger.debug(
            "Registered %s slug `%s` with %s scope",
            record_type.__name__,
            spec.name,
            strategy.name.lower(),
        )
        return spec

    def spec_for(self, record_type: type) -> SlugSpec:
        """Return the spec of a type or of its nearest registered base.

        Raises:
            ConfigurationError: If no type in the MRO is registered.
        """
        for klass in record_type.__mro__:
            spec = self._specs.get(klass)
            if spec is not None:
                return spec
        raise ConfigurationError(f"{record_type.__name__} has no registered slug")

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __contains__(self, record_type: object) -> bool:
        return isinstance(record_type, type) and any(
            klass in self._specs for klass in record_type.__mro__
        )

    def __len__(self) -> int:
        return len(self._specs)
