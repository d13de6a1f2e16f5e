from __future__ import annotations

import textwrap
import pytest
from pathlib import Path

from docslug.config import (
    SlugConfig,
    apply_overrides,
    build_config,
    load_config,
    validate_config,
)
from docslug.exceptions import ConfigurationError


def _write_pyproject(base: Path, body: str) -> Path:
    path = base / "pyproject.toml"
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


def _write_dotfile(base: Path, body: str) -> Path:
    path = base / ".docslug.toml"
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


def test_loads_config_from_pyproject(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.docslug]
        slug_field = "permalink"
        permanent = true
        index = true
        max_retries = 5
        max_length = 60
        """,
    )

    config = load_config(tmp_path)

    assert config == SlugConfig(
        slug_field="permalink",
        permanent=True,
        index=True,
        max_retries=5,
        max_length=60,
    )


def test_loads_config_from_dotfile(tmp_path: Path):
    _write_dotfile(
        tmp_path,
        """
        [docslug]
        slug_field = "handle"
        """,
    )
    nested = tmp_path / "child"
    nested.mkdir()

    config = load_config(nested)

    assert config.slug_field == "handle"
    assert config.max_retries == 3


def test_pyproject_without_table_falls_through_to_dotfile(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [project]
        name = "example"
        """,
    )
    _write_dotfile(
        tmp_path,
        """
        [tool.docslug]
        permanent = true
        """,
    )

    assert load_config(tmp_path).permanent is True


def test_returns_defaults_without_config(tmp_path: Path):
    assert load_config(tmp_path) == SlugConfig()


def test_empty_table_returns_defaults(tmp_path: Path):
    _write_pyproject(tmp_path, "[tool.docslug]\n")

    assert load_config(tmp_path) == SlugConfig()


def test_undecodable_toml_is_skipped(tmp_path: Path):
    _write_pyproject(tmp_path, "[tool.docslug\nslug_field = ")

    assert load_config(tmp_path) == SlugConfig()


def test_unknown_keys_raise(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.docslug]
        separator = "_"
        """,
    )

    with pytest.raises(ConfigurationError, match=r"Invalid `\[tool.docslug\]` settings"):
        load_config(tmp_path)


def test_non_table_value_raises(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool]
        docslug = 3
        """,
    )

    with pytest.raises(ConfigurationError):
        load_config(tmp_path)


@pytest.mark.parametrize(
    ("config", "message"),
    [
        (SlugConfig(slug_field=""), "slug_field"),
        (SlugConfig(slug_field="my slug"), "slug_field"),
        (SlugConfig(permanent="yes"), "permanent"),
        (SlugConfig(index=1), "index"),
        (SlugConfig(max_retries=-1), "max_retries"),
        (SlugConfig(max_retries=True), "max_retries"),
        (SlugConfig(max_length=0), "max_length"),
        (SlugConfig(max_length=2.5), "max_length"),
    ],
)
def test_validate_config_rejects_invalid_values(config: SlugConfig, message: str):
    with pytest.raises(ConfigurationError, match=message):
        validate_config(config)


def test_apply_overrides_ignores_none():
    config = SlugConfig(max_length=10)

    assert apply_overrides(config, max_length=None) is config
    assert apply_overrides(config, max_length=20).max_length == 20


def test_build_config_validates_overrides(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.docslug]
        max_length = 30
        """,
    )

    assert build_config(tmp_path, max_retries=1) == SlugConfig(max_length=30, max_retries=1)
    with pytest.raises(ConfigurationError):
        build_config(tmp_path, max_length=-4)
