"""Exception hierarchy.

Everything raised on purpose by this package derives from RedactionError,
so callers can catch one type and still tell rule problems from file
problems.
"""

from __future__ import annotations
from pathlib import Path


class RedactionError(Exception):
    """Base class for all pii-log-redactor errors."""


class InvalidIdentity(RedactionError):
    """The user identity is missing a field or carries a bad value."""


class ConfigError(RedactionError):
    """The rule configuration could not be read or is malformed."""


class UnresolvedPlaceholder(RedactionError):
    """A template references a ${name} that the mapping doesn't define."""

    def __init__(self, placeholder: str, source: str | None = None) -> None:
        self.placeholder = placeholder
        self.source = source
        where = f" in rule '{source}'" if source else ""
        super().__init__(f"Unresolved placeholder ${{{placeholder}}}{where}")


class InvalidPattern(RedactionError):
    """An expanded pattern is empty or not a valid regular expression."""

    def __init__(self, key: str, pattern: str, reason: str) -> None:
        self.key = key
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid pattern in rule '{key}': {reason} ({pattern!r})")


class FileProcessingError(RedactionError):
    """Reading a log file or writing its temp copy failed."""

    def __init__(
        self,
        path: Path,
        temp_path: Path | None,
        cause: BaseException,
    ) -> None:
        self.path = path
        self.temp_path = temp_path
        self.cause = cause
        # Files finished before this one; their temp copies are still on disk.
        self.completed: list = []
        super().__init__(f"Error occurred while processing log file {path}: {cause}")


class ReplaceError(RedactionError):
    """Swapping a finished temp file over its original failed."""
