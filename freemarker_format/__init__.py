"""
freemarker-format: reindent FreeMarker templates.

This package can be used both as a CLI tool and as a library.

CLI Usage:
    freemarker-format --write templates/page.ftl

Library Usage:
    from pathlib import Path
    from freemarker_format import FormatConfig, format_template

    source = Path("page.ftl").read_text()
    formatted = format_template(source, FormatConfig(tab_width=4))
"""

from .classifier import classify_line
from .config import ConfigError, FormatConfig
from .exceptions import FormatFileError
from .formatter import format_file, format_template
from .indenter import advance, render_lines
from .lines import build_logical_lines, split_long_line
from .models import IndentState, LineRole

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "format_template",
    "format_file",
    "build_logical_lines",
    "split_long_line",
    "classify_line",
    "advance",
    "render_lines",
    # Data models
    "FormatConfig",
    "IndentState",
    "LineRole",
    # Exceptions
    "ConfigError",
    "FormatFileError",
    # Version
    "__version__",
]
