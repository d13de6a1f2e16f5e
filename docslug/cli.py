"""
Command-line access to slug normalization and disambiguation.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
from .config import build_config
from .exceptions import ConfigurationError
from .normalize import normalize
from .uniqueness import next_slug

__all__ = ["cli"]


def _load_config(max_length: int | None):
    try:
        return build_config(Path.cwd(), max_length=max_length)
    except ConfigurationError as error:
        raise click.BadParameter(str(error)) from error


@click.group()
@click.version_option()
@click.option("--verbose", is_flag=True, help="Log debug output to stderr")
def cli(verbose: bool = False):
    """
    Generate URL slugs and resolve collisions between them.

    Settings are read from the `[tool.docslug]` table of the nearest
    `pyproject.toml` or from `.docslug.toml`.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG)


@cli.command("normalize")
@click.option("--max-length", type=click.IntRange(min=1), help="Maximum slug length")
@click.argument("words", nargs=-1, required=True)
def normalize_command(words: tuple[str, ...], max_length: int | None = None):
    """
    Print the base slug for WORDS joined with spaces.

    Examples:
        docslug normalize "Héllo, World!"
    """
    config = _load_config(max_length)
    click.echo(normalize(" ".join(words), max_length=config.max_length))


@cli.command("next")
@click.option(
    "--existing",
    type=click.File("r", encoding="utf-8"),
    default="-",
    help="File listing taken slugs, one per line (default: stdin)",
)
@click.option("--max-length", type=click.IntRange(min=1), help="Maximum base slug length")
@click.argument("text")
def next_command(text: str, existing, max_length: int | None = None):
    """
    Print the first free slug for TEXT given the slugs already taken.

    Examples:
        printf 'foo\\nfoo-1\\n' | docslug next Foo  # foo-2
    """
    config = _load_config(max_length)
    base = normalize(text, max_length=config.max_length)
    if not base:
        raise click.ClickException(f"{text!r} has no characters usable in a slug")

    taken = [line.strip() for line in existing if line.strip()]
    click.echo(next_slug(base, taken))


if __name__ == "__main__":
    cli()
