"""Exception hierarchy for mrdm.

Every error raised on purpose by the package derives from :class:`MrdmError`
so the CLI can report it with one handler.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class MrdmError(Exception):
    """Base exception for mrdm errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigError(MrdmError):
    """Invalid configuration: categories, markers, or the compiled rule."""

    pass


class TodoIOError(MrdmError):
    """A file could not be read, written, or replaced."""

    NOT_READABLE = "not-readable"
    NOT_WRITABLE = "not-writable"
    RENAME_FAILED = "rename-failed"

    def __init__(
        self,
        message: str,
        path: str | Path | None = None,
        reason: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.path = Path(path) if path is not None else None
        self.reason = reason


class StoreParseError(MrdmError):
    """The persisted store is malformed. Always recovered as an empty store."""

    pass


class LockError(MrdmError):
    """Shared scan state could not be locked."""

    def __init__(
        self,
        message: str,
        resource: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.resource = resource


class PromptError(MrdmError):
    """Operator input closed or failed during reconciliation."""

    pass


__all__ = [
    "ConfigError",
    "LockError",
    "MrdmError",
    "PromptError",
    "StoreParseError",
    "TodoIOError",
]
