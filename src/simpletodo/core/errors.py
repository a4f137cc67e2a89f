# src/simpletodo/core/errors.py

"""
Error kinds raised by the data services.

All of them derive from TodoDataError so callers (console, UI) can catch the
whole family in one place. None of them is retried internally.
"""

from __future__ import annotations


class TodoDataError(Exception):
    """Base class for backup/export/search data errors."""


class StorageUnavailable(TodoDataError):
    """Directory or file I/O failed (no space, permission denied, missing dir)."""


class ParseFailure(TodoDataError):
    """A CSV or JSON body could not be parsed."""


class InvalidBackupFormat(ParseFailure):
    """A backup document is missing required fields or has the wrong shape."""


class VersionMismatch(TodoDataError):
    def __init__(self, *, expected: str, found: object) -> None:
        super().__init__(f"Backup version {found!r} is not compatible with {expected!r}")
        self.expected = expected
        self.found = found


class DeleteFailed(TodoDataError):
    def __init__(self, path: str, reason: str = "") -> None:
        msg = f"Could not delete {path}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)
        self.path = path
