"""Filesystem access for the command line tool.

Only regular files below the working directory are read. A template is
replaced through a temporary file in its own directory.
"""

from __future__ import annotations

import os
import stat
import tempfile
from collections.abc import Callable
from pathlib import Path

from .constants import DEFAULT_MAX_FILE_SIZE, TEMPLATE_EXTENSIONS

MAX_FILE_SIZE_ENV_VAR = "FREEMARKER_FORMAT_MAX_FILE_SIZE"

_FILE_KINDS = (
    (stat.S_ISDIR, "directory"),
    (stat.S_ISFIFO, "FIFO"),
    (stat.S_ISSOCK, "socket"),
    (stat.S_ISCHR, "character device"),
    (stat.S_ISBLK, "block device"),
    (stat.S_ISLNK, "symlink"),
)


def get_max_file_size(default: int = DEFAULT_MAX_FILE_SIZE) -> int:
    """Resolve the maximum template size, honouring the environment override.

    Args:
        default: Size in bytes used when the environment variable is unset.

    Returns:
        int: Maximum allowed size in bytes.

    Raises:
        ValueError: If the environment value is not a positive integer.

    Examples:
        os.environ["FREEMARKER_FORMAT_MAX_FILE_SIZE"] = "65536"
        get_max_file_size()  # 65536
    """
    raw_value = os.environ.get(MAX_FILE_SIZE_ENV_VAR)
    if raw_value is None:
        return default

    try:
        limit = int(raw_value)
    except ValueError as error:
        raise ValueError(
            f"Invalid value for {MAX_FILE_SIZE_ENV_VAR}: {raw_value} (expected positive integer)"
        ) from error

    if limit <= 0:
        raise ValueError(f"{MAX_FILE_SIZE_ENV_VAR} must be a positive integer, got {limit}.")
    return limit


def describe_file_kind(mode: int) -> str:
    """Name the kind of filesystem object a stat mode describes."""
    for predicate, kind in _FILE_KINDS:
        if predicate(mode):
            return kind
    return "regular file" if stat.S_ISREG(mode) else "special file"


def contains_symlink(path: Path) -> bool:
    """Return True when `path` or one of its parents is a symlink."""
    for candidate in (path, *path.parents):
        try:
            if candidate.is_symlink():
                return True
        except OSError:
            continue
    return False


def is_template_path(path: Path) -> bool:
    return path.suffix.lower() in TEMPLATE_EXTENSIONS


def resolve_template(raw_path: str, base_dir: Path) -> Path:
    """Turn a user supplied path into the absolute path of a template.

    Args:
        raw_path: Path given on the command line.
        base_dir: Resolved working directory; templates must live below it.

    Returns:
        Path: Resolved path to the template.

    Raises:
        ValueError: If the path crosses a symlink, does not exist, is not a
            regular file, lies outside `base_dir` or lacks a template
            extension.

    Examples:
        resolve_template("templates/page.ftl", Path.cwd().resolve())
    """
    path = Path(raw_path).expanduser()
    if contains_symlink(path):
        raise ValueError(f"Symlinks are not supported for security reasons: {path}")

    try:
        resolved = path.resolve(strict=True)
        file_mode = resolved.stat().st_mode
    except FileNotFoundError as error:
        raise ValueError(f"{path} does not exist.") from error
    except OSError as error:
        raise ValueError(f"Error resolving {path}: {error}") from error

    if not stat.S_ISREG(file_mode):
        raise ValueError(f"{resolved} is a {describe_file_kind(file_mode)}, not a regular file.")

    if not resolved.is_relative_to(base_dir):
        raise ValueError(f"{resolved} is outside of the working directory {base_dir}.")

    if not is_template_path(resolved):
        raise ValueError(
            f"{resolved} is not a FreeMarker template.\n"
            f"Supported extensions are: {', '.join(TEMPLATE_EXTENSIONS)}"
        )
    return resolved


def stat_template(filepath: Path, max_size: int | None = None) -> os.stat_result:
    """Stat a template without following symlinks.

    Args:
        filepath: Template to inspect.
        max_size: Optional size limit in bytes.

    Returns:
        os.stat_result: Metadata of the regular file.

    Raises:
        IOError: If the file is missing, is not a regular file or is larger
            than `max_size`.
    """
    try:
        file_stat = os.stat(filepath, follow_symlinks=False)
    except OSError as error:
        raise IOError(f"Error accessing {filepath}: {error}") from error

    if not stat.S_ISREG(file_stat.st_mode):
        kind = describe_file_kind(file_stat.st_mode)
        raise IOError(f"{filepath} is a {kind}, not a regular file.")

    if max_size is not None and file_stat.st_size > max_size:
        raise IOError(f"{filepath} exceeds the maximum allowed size of {max_size} bytes.")
    return file_stat


def fingerprint(file_stat: os.stat_result) -> tuple:
    """Identity and content markers used to notice concurrent edits."""
    return (
        getattr(file_stat, "st_ino", None),
        getattr(file_stat, "st_dev", None),
        file_stat.st_size,
        file_stat.st_mtime_ns,
    )


def ensure_unchanged(filepath: Path, expected: os.stat_result) -> os.stat_result:
    """Re-stat `filepath` and fail if it differs from `expected`.

    Raises:
        IOError: If the file disappeared, was replaced or was modified.
    """
    current = stat_template(filepath)
    if fingerprint(current) != fingerprint(expected):
        raise IOError(f"{filepath} changed during processing; refusing to overwrite.")
    return current


def read_template(filepath: Path) -> str:
    """Read a template as UTF-8 text.

    Raises:
        IOError: If the file cannot be opened.
        UnicodeDecodeError: If the content is not valid UTF-8.

    Examples:
        source = read_template(Path("page.ftl"))
    """
    try:
        with open(filepath, encoding="UTF-8") as handle:
            return handle.read()
    except (
        FileNotFoundError,
        PermissionError,
        IsADirectoryError,
        NotADirectoryError,
    ) as error:
        raise IOError(f"Error accessing {filepath}: {error}") from error


def write_formatted(
    filepath: Path,
    formatted: str,
    expected: os.stat_result,
    warn: Callable[[str], None] | None = None,
):
    """Replace a template with its formatted text.

    The text is written to a temporary file next to `filepath`, which takes
    over the original permission bits (and ownership when the process may
    change it) before being renamed over the template.

    Args:
        filepath: Template to replace.
        formatted: New content, written without newline translation.
        expected: Stat taken before the template was read.
        warn: Receives non-fatal messages, such as lost ownership.

    Raises:
        IOError: If the template changed since it was read or the
            replacement fails.

    Examples:
        write_formatted(Path("page.ftl"), formatted, stat_before)
    """
    ensure_unchanged(filepath, expected)

    fd, temp_name = tempfile.mkstemp(
        dir=filepath.parent, prefix=f".{filepath.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="UTF-8", newline="") as handle:
            handle.write(formatted)
            handle.flush()
            os.fsync(handle.fileno())
            _copy_ownership(handle.fileno(), expected, filepath, warn)
            os.fchmod(handle.fileno(), stat.S_IMODE(expected.st_mode))
        os.replace(temp_name, filepath)
    except OSError as error:
        raise IOError(f"Error writing {filepath}: {error}") from error
    finally:
        Path(temp_name).unlink(missing_ok=True)


def _copy_ownership(
    fd: int,
    expected: os.stat_result,
    filepath: Path,
    warn: Callable[[str], None] | None,
):
    uid = getattr(expected, "st_uid", None)
    gid = getattr(expected, "st_gid", None)
    if uid is None or gid is None or not hasattr(os, "fchown"):
        return

    try:
        os.fchown(fd, uid, gid)
    except PermissionError:
        if warn is not None:
            warn(
                f"Warning: Could not preserve file ownership for {filepath.name} "
                "(requires elevated privileges)"
            )
