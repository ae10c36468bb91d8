"""Formatting options and their discovery in TOML files."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
import tomllib

TOOL_NAME = "freemarker-format"

# File name and the tables searched in it, in lookup order.
CONFIG_SOURCES = (
    ("pyproject.toml", (("tool", TOOL_NAME),)),
    (f".{TOOL_NAME}.toml", ((TOOL_NAME,), ("tool", TOOL_NAME))),
)

# Prettier option names accepted in config files.
KEY_ALIASES = {
    "printWidth": "print_width",
    "tabWidth": "tab_width",
    "useTabs": "use_tabs",
    "maxFileSize": "max_file_size",
}

POSITIVE_INT_FIELDS = ("print_width", "tab_width", "max_file_size")


@dataclass
class FormatConfig:
    """Options controlling how templates are laid out.

    Attributes:
        print_width: Lines longer than this are split where it is safe.
        tab_width: Spaces per indentation level when not using tabs.
        use_tabs: Indent with one tab character per level.
        max_file_size: Largest template, in bytes, the CLI will read.

    Examples:
        FormatConfig(print_width=120, use_tabs=True)
    """

    print_width: int = 80
    tab_width: int = 2
    use_tabs: bool = False
    max_file_size: int = 10 * 1024 * 1024

    @property
    def indent_unit(self) -> str:
        """Text emitted for one indentation level."""
        return "\t" if self.use_tabs else " " * self.tab_width


class ConfigError(ValueError):
    """Raised for malformed config tables and invalid option values.

    Examples:
        raise ConfigError("`tab_width` must be a positive integer")
    """


def config_keys() -> list[str]:
    """Option names accepted in config tables, aliases excluded."""
    return [field.name for field in fields(FormatConfig)]


def load_config(search_path: Path) -> FormatConfig:
    """Find the closest config table at or above `search_path`.

    Each directory is checked for ``pyproject.toml`` (table
    ``[tool.freemarker-format]``) and then ``.freemarker-format.toml`` (table
    ``[freemarker-format]`` or ``[tool.freemarker-format]``). The first table
    found wins, even an empty one. Files that cannot be read or parsed are ignored.

    Args:
        search_path: Directory where the lookup starts.

    Returns:
        FormatConfig: Options from the table found, defaults for missing keys,
            or all defaults when no table exists.

    Raises:
        ConfigError: If the table found is not a table or has unknown keys.

    Examples:
        load_config(Path("templates/emails"))
    """
    start = search_path.resolve()
    for directory in (start, *start.parents):
        for filename, table_paths in CONFIG_SOURCES:
            config_file = directory / filename
            data = _read_toml(config_file)
            if data is None:
                continue
            for table_path in table_paths:
                found, table = _lookup(data, table_path)
                if found:
                    return _config_from_table(table, config_file, table_path)
    return FormatConfig()


def _read_toml(config_file: Path) -> dict | None:
    if not config_file.is_file():
        return None
    try:
        with open(config_file, "rb") as stream:
            return tomllib.load(stream)
    except (OSError, tomllib.TOMLDecodeError):
        return None


def _lookup(data: dict, table_path: tuple[str, ...]) -> tuple[bool, object]:
    node: object = data
    for key in table_path:
        if not isinstance(node, dict) or key not in node:
            return False, None
        node = node[key]
    return True, node


def _config_from_table(table: object, config_file: Path, table_path: tuple[str, ...]) -> FormatConfig:
    location = f"`[{'.'.join(table_path)}]` in {config_file}"
    if not isinstance(table, dict):
        raise ConfigError(f"Invalid {location}: expected a table")

    settings = {KEY_ALIASES.get(key, key): value for key, value in table.items()}
    unknown = sorted(set(settings) - set(config_keys()))
    if unknown:
        raise ConfigError(f"Invalid {location}: unsupported keys {', '.join(unknown)}")
    return FormatConfig(**settings)


def validate_config(config: FormatConfig) -> None:
    """Check that every option has a usable value.

    Raises:
        ConfigError: If a width or the size limit is not a positive integer,
            or `use_tabs` is not a boolean.

    Examples:
        validate_config(FormatConfig(tab_width=4))
    """
    for name in POSITIVE_INT_FIELDS:
        value = getattr(config, name)
        # bool is an int subclass but never a valid width
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"`{name}` must be an integer")
        if value <= 0:
            raise ConfigError(f"`{name}` must be a positive integer")

    if not isinstance(config.use_tabs, bool):
        raise ConfigError("`use_tabs` must be a boolean")


def apply_overrides(config: FormatConfig, **overrides: object) -> FormatConfig:
    """Return `config` with the given options replaced.

    Args:
        config: Options loaded from file or defaults.
        overrides: Replacement values by option name. None means "not given"
            and keeps the current value.

    Returns:
        FormatConfig: Updated copy, or `config` itself when nothing changes.

    Raises:
        TypeError: If an override names an unknown option.

    Examples:
        apply_overrides(config, tab_width=4, use_tabs=None)
    """
    given = {name: value for name, value in overrides.items() if value is not None}
    return replace(config, **given) if given else config


def build_config(search_path: Path, **overrides: object) -> FormatConfig:
    """Load options for `search_path`, apply overrides and validate them.

    Raises:
        ConfigError: If the config table or the final values are invalid.

    Examples:
        build_config(Path.cwd(), print_width=100)
    """
    config = apply_overrides(load_config(search_path), **overrides)
    validate_config(config)
    return config
