"""
Reindents FreeMarker templates.
By default the formatted template is written to stdout; `--write` rewrites the
files in place and `--check` only reports files that would change.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import click
from .config import build_config
from .exceptions import FormatFileError
from .filesystem import (
    ensure_unchanged,
    get_max_file_size,
    resolve_template,
    stat_template,
    write_formatted,
)
from .formatter import format_file

__all__ = ["cli"]

LOG_FORMAT = "[%(levelname)s] %(message)s"

logger = logging.getLogger(__name__)


@click.command()
@click.version_option(package_name="freemarker-format")
@click.option("--print-width", type=int, help="Width at which long lines are split")
@click.option("--tab-width", type=int, help="Spaces per indentation level")
@click.option("--use-tabs/--no-use-tabs", default=None, help="Indent with tabs instead of spaces")
@click.option("-w", "--write", is_flag=True, help="Rewrite files in place")
@click.option("--check", is_flag=True, help="Exit with status 1 if any file would change")
@click.option("-v", "--verbose", is_flag=True, help="Log debug information to stderr")
@click.argument("filepaths", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
def cli(
    filepaths: tuple[str, ...],
    print_width: int | None = None,
    tab_width: int | None = None,
    use_tabs: bool | None = None,
    write: bool = False,
    check: bool = False,
    verbose: bool = False,
):
    """
    Entry point for formatting FreeMarker templates.

    Args:
        filepaths: Paths to the templates to format.
        print_width: Override for the line splitting width.
        tab_width: Override for the number of spaces per level.
        use_tabs: Override for tab indentation.
        write: Rewrite changed files instead of printing them.
        check: Report files that are not formatted and exit with status 1.
        verbose: Enable debug logging.

    Returns:
        None.

    Raises:
        click.BadParameter: If a path is invalid or the configuration contains
            unsupported values.
        click.ClickException: If a file cannot be read, exceeds the size
            limit, or changes while being formatted.

    Examples:
        freemarker-format --tab-width 4 --write templates/page.ftl
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT)

    if write and check:
        raise click.UsageError("--write and --check are mutually exclusive")

    base_dir = Path.cwd().resolve()
    overrides = {"print_width": print_width, "tab_width": tab_width, "use_tabs": use_tabs}
    unformatted: list[Path] = []

    for raw_path in filepaths:
        filepath, initial_stat, original, formatted = _format_one(raw_path, base_dir, overrides)
        if formatted == original:
            logger.debug("%s is already formatted", filepath)
        else:
            logger.debug("%s needs formatting", filepath)

        if check:
            if formatted != original:
                unformatted.append(filepath)
        elif write:
            if formatted != original:
                _write_back(filepath, formatted, initial_stat)
        else:
            print(formatted, end="")

    for filepath in unformatted:
        click.echo(f"Would reformat {filepath}", err=True)
    if unformatted:
        raise SystemExit(1)


def _format_one(
    raw_path: str, base_dir: Path, overrides: dict[str, object]
) -> tuple[Path, os.stat_result, str, str]:
    """Validate, read and format a single template for the command."""
    try:
        filepath = resolve_template(raw_path, base_dir)
        config = build_config(filepath.parent, **overrides)
    except ValueError as error:
        raise click.BadParameter(str(error)) from error

    try:
        max_file_size = get_max_file_size(default=config.max_file_size)
        initial_stat = stat_template(filepath, max_file_size)
        original, formatted = format_file(filepath, config)
        ensure_unchanged(filepath, initial_stat)
    except (FormatFileError, ValueError, IOError) as error:
        raise click.ClickException(str(error)) from error

    return filepath, initial_stat, original, formatted


def _write_back(filepath: Path, formatted: str, initial_stat: os.stat_result):
    try:
        write_formatted(
            filepath,
            formatted,
            initial_stat,
            warn=lambda message: click.echo(message, err=True),
        )
    except IOError as error:
        raise click.ClickException(str(error)) from error
    logger.debug("Rewrote %s", filepath)


if __name__ == "__main__":
    cli()
