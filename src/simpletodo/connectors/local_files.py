# src/simpletodo/connectors/local_files.py

"""
Console-side implementations of the share/pick ports.

There is no share sheet or file dialog in a terminal: "sharing" prints where the
file was written, and "picking" returns a path the user typed as a command
argument.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable

logger = logging.getLogger(__name__)


class ConsoleShareSink:
    def __init__(self, emit: Callable[[str], None] = print) -> None:
        self._emit = emit

    async def is_available(self) -> bool:
        return True

    async def share(self, path: str, *, mime_type: str, dialog_title: str) -> None:
        logger.debug("share path=%s mime=%s title=%s", path, mime_type, dialog_title)
        self._emit(f"{dialog_title}: {os.path.abspath(path)} ({mime_type})")


class StaticDocumentPicker:
    """Picker that returns a fixed path; None behaves as a cancelled pick."""

    def __init__(self, path: str | None = None) -> None:
        self.path = path

    async def pick_document(self, *, mime_type: str) -> str | None:
        if self.path is None:
            return None
        if not os.path.isfile(self.path):
            raise FileNotFoundError(self.path)
        return self.path
