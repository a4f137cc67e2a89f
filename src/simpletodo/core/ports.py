# src/simpletodo/core/ports.py

"""
Ports (interfaces) used by the core.

The services depend on Protocols instead of concrete implementations.
This keeps storage and platform collaborators swappable and makes testing easier.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Protocol

Clock = Callable[[], datetime]
# Returns an aware datetime; services never call datetime.now() directly.


class KeyValueStore(Protocol):
    """
    Durable string-keyed store.

    No transactions and no multi-key atomicity: each set() is atomic on its own.
    """

    async def get(self, key: str) -> str | None: ...
    async def set(self, key: str, value: str) -> None: ...
    async def remove(self, key: str) -> None: ...


class DirectoryStore(Protocol):
    """
    File access rooted at the app-private directories.

    Paths are plain strings. Failures surface as OSError; services translate
    them into their own error kinds.
    """

    document_directory: str
    cache_directory: str

    async def exists(self, path: str) -> bool: ...
    async def mkdir(self, path: str, *, intermediates: bool = True) -> None: ...
    async def read_file(self, path: str) -> str: ...
    async def write_file(self, path: str, content: str) -> None: ...
    async def delete_file(self, path: str) -> None: ...
    async def list_dir(self, path: str) -> list[str]: ...
    async def copy_file(self, src: str, dst: str) -> None: ...


class ShareSink(Protocol):
    """Hands a finished file to the platform (share sheet, mail, etc.)."""

    async def is_available(self) -> bool: ...
    async def share(self, path: str, *, mime_type: str, dialog_title: str) -> None: ...


class DocumentPicker(Protocol):
    """Lets the user choose a file. None means the pick was cancelled."""

    async def pick_document(self, *, mime_type: str) -> str | None: ...
