"""Template formatting entry points."""

from __future__ import annotations

import logging
from pathlib import Path

from .config import FormatConfig, validate_config
from .exceptions import FormatFileError
from .filesystem import read_template
from .indenter import render_lines
from .lines import build_logical_lines

logger = logging.getLogger(__name__)

# Characters `str.splitlines` treats as line boundaries
LINE_BREAKS = "\n\r\v\f\x1c\x1d\x1e\x85\u2028\u2029"


def format_template(text: str, config: FormatConfig | None = None) -> str:
    """Reindent FreeMarker template source.

    Rebuilds logical lines (joining wrapped self-closing macro calls and
    splitting overlong lines at safe points), then renders every line at the
    depth implied by the directives, macro calls, markup elements and JSON
    braces that enclose it. Blank lines are kept; content is never reordered.
    Any string is accepted, including unbalanced or malformed templates.

    Args:
        text: Template source.
        config: Formatting options. Defaults to a new `FormatConfig` when
            omitted.

    Returns:
        str: Formatted template, ending with a newline when `text` does.

    Raises:
        ConfigError: If the configuration fails validation.

    Examples:
        format_template("<#if user??>\\n<p>Hi</p>\\n</#if>\\n")
        # '<#if user??>\\n  <p>Hi</p>\\n</#if>\\n'
    """
    config = config or FormatConfig()
    validate_config(config)

    if not text:
        return ""

    logical_lines = build_logical_lines(text, config)
    rendered = render_lines(logical_lines, config.indent_unit)
    logger.debug("Formatted %d logical lines", len(rendered))

    formatted = "\n".join(rendered)
    if text[-1] in LINE_BREAKS:
        formatted += "\n"
    return formatted


def format_file(filepath: Path, config: FormatConfig | None = None) -> tuple[str, str]:
    """Read a template file and format it.

    Args:
        filepath: Path to the template.
        config: Formatting options; defaults to a new `FormatConfig`.

    Returns:
        tuple[str, str]: The original source and its formatted rendering.

    Raises:
        FormatFileError: If the file cannot be read or is not valid UTF-8.
        ConfigError: If the configuration fails validation.

    Examples:
        original, formatted = format_file(Path("page.ftl"))
    """
    try:
        original = read_template(filepath)
    except UnicodeDecodeError as error:
        raise FormatFileError(filepath, f"invalid UTF-8 sequence: {error}") from error
    except IOError as error:
        raise FormatFileError(filepath, str(error)) from error

    return original, format_template(original, config)
