from __future__ import annotations

import textwrap
import pytest
from pathlib import Path

from freemarker_format.config import (
    ConfigError,
    FormatConfig,
    apply_overrides,
    build_config,
    load_config,
    validate_config,
)


def _write_pyproject(base: Path, body: str) -> Path:
    path = base / "pyproject.toml"
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


def _write_dotfile(base: Path, body: str) -> Path:
    path = base / ".freemarker-format.toml"
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


def test_loads_config_from_pyproject(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.freemarker-format]
        print_width = 100
        tab_width = 4
        use_tabs = true
        max_file_size = 1024
        """,
    )

    config = load_config(tmp_path)

    assert config == FormatConfig(print_width=100, tab_width=4, use_tabs=True, max_file_size=1024)


def test_loads_config_from_dotfile(tmp_path: Path):
    _write_dotfile(
        tmp_path,
        """
        [freemarker-format]
        tab_width = 3
        """,
    )
    nested = tmp_path / "child"
    nested.mkdir()

    config = load_config(nested)

    assert config.tab_width == 3
    assert config.print_width == FormatConfig().print_width


def test_dotfile_accepts_tool_table(tmp_path: Path):
    _write_dotfile(
        tmp_path,
        """
        [tool.freemarker-format]
        print_width = 60
        """,
    )

    assert load_config(tmp_path).print_width == 60


def test_accepts_prettier_option_names(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.freemarker-format]
        printWidth = 120
        tabWidth = 4
        useTabs = true
        """,
    )

    config = load_config(tmp_path)

    assert config.print_width == 120
    assert config.tab_width == 4
    assert config.use_tabs is True


def test_load_config_walks_up_directories(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.freemarker-format]
        print_width = 90
        """,
    )
    nested = tmp_path / "a" / "b" / "c"
    nested.mkdir(parents=True)

    config = load_config(nested)

    assert config.print_width == 90


def test_pyproject_without_table_is_skipped(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.freemarker-format]
        tab_width = 8
        """,
    )
    child = tmp_path / "child"
    child.mkdir()
    _write_pyproject(
        child,
        """
        [project]
        name = "unrelated"
        """,
    )

    assert load_config(child).tab_width == 8


def test_empty_config_table_stops_inheritance(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.freemarker-format]
        tab_width = 8
        """,
    )
    child = tmp_path / "child"
    child.mkdir()
    _write_pyproject(
        child,
        """
        [tool.freemarker-format]
        """,
    )

    config = load_config(child)

    assert config.tab_width == FormatConfig().tab_width


def test_load_config_returns_defaults_when_missing(tmp_path: Path):
    assert load_config(tmp_path) == FormatConfig()


def test_load_config_skips_invalid_toml(tmp_path: Path):
    invalid_dir = tmp_path / "invalid"
    invalid_dir.mkdir()
    _write_pyproject(invalid_dir, "not = {valid")
    _write_pyproject(
        tmp_path,
        """
        [tool.freemarker-format]
        print_width = 70
        """,
    )

    nested = invalid_dir / "child"
    nested.mkdir()
    config = load_config(nested)

    assert config.print_width == 70


def test_load_config_errors_on_unknown_keys(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.freemarker-format]
        tab_width = 2
        unexpected = true
        """,
    )

    with pytest.raises(ConfigError, match="unexpected"):
        load_config(tmp_path)


def test_load_config_errors_on_non_table(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool]
        freemarker-format = 3
        """,
    )

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_indent_unit():
    assert FormatConfig().indent_unit == "  "
    assert FormatConfig(tab_width=4).indent_unit == "    "
    assert FormatConfig(tab_width=4, use_tabs=True).indent_unit == "\t"


def test_apply_overrides_ignores_none():
    config = FormatConfig(tab_width=4)

    assert apply_overrides(config, tab_width=None, use_tabs=None) is config
    assert apply_overrides(config, print_width=100) == FormatConfig(tab_width=4, print_width=100)


def test_apply_overrides_rejects_unknown_field():
    with pytest.raises(TypeError):
        apply_overrides(FormatConfig(), indent="  ")


def test_build_config_overrides_file_settings(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.freemarker-format]
        tab_width = 8
        use_tabs = true
        """,
    )

    config = build_config(tmp_path, tab_width=3, use_tabs=False)

    assert config.tab_width == 3
    assert config.use_tabs is False


def test_build_config_validates(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.freemarker-format]
        print_width = 0
        """,
    )

    with pytest.raises(ConfigError):
        build_config(tmp_path)


@pytest.mark.parametrize(
    "config",
    [
        FormatConfig(print_width=0),
        FormatConfig(tab_width=-1),
        FormatConfig(max_file_size=0),
        FormatConfig(use_tabs=1),  # type: ignore[arg-type]
    ],
)
def test_validate_config_rejects_invalid_values(config: FormatConfig):
    with pytest.raises(ConfigError):
        validate_config(config)


@pytest.mark.parametrize(
    "config",
    [
        FormatConfig(print_width="wide"),  # type: ignore[arg-type]
        FormatConfig(tab_width=2.5),  # type: ignore[arg-type]
        FormatConfig(max_file_size=True),  # type: ignore[arg-type]
    ],
)
def test_validate_config_rejects_non_numeric_values(config: FormatConfig):
    with pytest.raises(ConfigError):
        validate_config(config)
