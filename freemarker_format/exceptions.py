"""Package-specific exception types."""

from __future__ import annotations

from pathlib import Path


class FormatFileError(Exception):
    """Raised when a template file cannot be read for formatting.

    Args:
        filepath: Path of the offending file.
        reason: Human readable description of the failure.
    """

    def __init__(self, filepath: Path, reason: str):
        self.filepath = filepath
        self.reason = reason
        super().__init__(f"{filepath}: {reason}")
