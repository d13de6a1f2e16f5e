"""Configuration loading and management."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
import tomllib

from .exceptions import ConfigurationError


@dataclass
class SlugConfig:
    """Project-wide defaults for slug registration and generation.

    Attributes:
        slug_field: Attribute that stores the slug when a registration does not
            name one.
        permanent: Default permanence for registrations.
        index: Default for backing registrations with a scoped unique index.
        max_retries: Regeneration attempts after a unique index conflict.
        max_length: Maximum length of a base token, or None for no limit.

    Examples:
        SlugConfig(slug_field="permalink", permanent=True)
    """

    # Registration defaults
    slug_field: str = "slug"
    permanent: bool = False
    index: bool = False

    # Generation
    max_retries: int = 3
    max_length: int | None = None


def load_config(search_path: Path) -> SlugConfig:
    """Load configuration from the nearest config file.

    Walks parent directories from `search_path` to the filesystem root, reading
    the ``[tool.docslug]`` table from `pyproject.toml` and the ``[docslug]`` or
    ``[tool.docslug]`` table from `.docslug.toml` when present. Returns default
    values when no configuration is found. TOML files that cannot be read or
    decoded are skipped.

    Args:
        search_path: Directory used as the starting point for configuration lookup.

    Returns:
        SlugConfig: Loaded configuration with defaults applied when necessary.

    Raises:
        ConfigurationError: If the table is present but not a mapping or
            contains unsupported keys.

    Examples:
        load_config(Path.cwd())
    """
    current = search_path.resolve()

    while True:
        pyproject_config = _load_from_file(
            current / "pyproject.toml", table_paths=[("tool", "docslug")]
        )
        if pyproject_config is not None:
            return pyproject_config

        dotfile_config = _load_from_file(
            current / ".docslug.toml",
            table_paths=[("docslug",), ("tool", "docslug")],
        )
        if dotfile_config is not None:
            return dotfile_config

        parent = current.parent
        if parent == current:
            break
        current = parent

    return SlugConfig()


_MISSING = object()


def _load_from_file(config_file: Path, table_paths: list[tuple[str, ...]]) -> SlugConfig | None:
    if not config_file.exists():
        return None

    try:
        with open(config_file, "rb") as stream:
            data = tomllib.load(stream)
    except (OSError, tomllib.TOMLDecodeError):
        return None

    for table_path in table_paths:
        raw_config = _extract_table(data, table_path)
        if raw_config is _MISSING:
            continue
        return _build_config_from_raw(raw_config, config_file, table_path)

    return None


def _extract_table(data: object, table_path: tuple[str, ...]) -> object:
    current = data
    for key in table_path:
        if not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]
    return current


def _build_config_from_raw(
    raw_config: object, config_file: Path, table_path: tuple[str, ...]
) -> SlugConfig:
    table_display = ".".join(table_path)

    if not isinstance(raw_config, dict):
        raise ConfigurationError(f"Invalid `[{table_display}]` settings in {config_file}")

    if not raw_config:
        return SlugConfig()

    try:
        return SlugConfig(**raw_config)
    except TypeError as error:
        raise ConfigurationError(
            f"Invalid `[{table_display}]` settings in {config_file}"
        ) from error


def validate_config(config: SlugConfig) -> None:
    """Validate a `SlugConfig` instance.

    Args:
        config: Configuration to validate.

    Returns:
        None.

    Raises:
        ConfigurationError: If the slug field is not an identifier, flags are
            not booleans, or numeric limits are out of range.

    Examples:
        validate_config(SlugConfig(max_retries=5))
    """
    if not isinstance(config.slug_field, str) or not config.slug_field.isidentifier():
        raise ConfigurationError("`slug_field` must be a valid attribute name")

    for key in ("permanent", "index"):
        if not isinstance(getattr(config, key), bool):
            raise ConfigurationError(f"`{key}` must be a boolean")

    _ensure_integers({"max_retries": config.max_retries})
    if config.max_retries < 0:
        raise ConfigurationError("`max_retries` must be >= 0")

    if config.max_length is not None:
        _ensure_integers({"max_length": config.max_length})
        if config.max_length <= 0:
            raise ConfigurationError("`max_length` must be a positive integer")


def apply_overrides(config: SlugConfig, **overrides: object) -> SlugConfig:
    """Apply override values to a `SlugConfig`.

    Args:
        config: Base configuration to update.
        overrides: Override values keyed by configuration field name; values set to
            None are ignored.

    Returns:
        SlugConfig: New configuration with the provided overrides applied. The
        original configuration is returned when no changes are supplied.

    Raises:
        TypeError: If an override name is not defined on `SlugConfig`.

    Examples:
        updated = apply_overrides(config, max_length=60)
    """
    changes = {key: value for key, value in overrides.items() if value is not None}
    if not changes:
        return config
    return replace(config, **changes)


def build_config(search_path: Path, **overrides: object) -> SlugConfig:
    """Load, override, and validate configuration.

    Args:
        search_path: Directory where configuration files are resolved.
        overrides: Override values keyed by configuration attributes; None values
            are ignored.

    Returns:
        SlugConfig: Validated configuration.

    Raises:
        ConfigurationError: If configuration loading or validation fails.

    Examples:
        config = build_config(Path.cwd(), max_length=80)
    """
    config = load_config(search_path)
    config = apply_overrides(config, **overrides)
    validate_config(config)
    return config


def _ensure_integers(values: dict[str, object]) -> None:
    for key, value in values.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigurationError(f"`{key}` must be an integer")
