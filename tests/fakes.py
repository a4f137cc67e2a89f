# tests/fakes.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta


class FakeKVStore:
    """
    In-memory KeyValueStore.

    - Captures every write for assertions
    - Can be told to fail on a given key to simulate a broken store
    """

    def __init__(self, data: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(data or {})
        self.writes: list[str] = []
        self.fail_on_set: set[str] = set()

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        if key in self.fail_on_set:
            raise OSError(f"simulated write failure for {key}")
        self.writes.append(key)
        self.data[key] = value

    async def remove(self, key: str) -> None:
        self.data.pop(key, None)


@dataclass(slots=True)
class SharedFile:
    path: str
    mime_type: str
    dialog_title: str


@dataclass(slots=True)
class FakeShareSink:
    """ShareSink that records what would have been shared."""

    available: bool = True
    fail: bool = False
    shared: list[SharedFile] = field(default_factory=list)

    async def is_available(self) -> bool:
        return self.available

    async def share(self, path: str, *, mime_type: str, dialog_title: str) -> None:
        if self.fail:
            raise RuntimeError("share sheet crashed")
        self.shared.append(SharedFile(path=path, mime_type=mime_type, dialog_title=dialog_title))


@dataclass(slots=True)
class FakeDocumentPicker:
    """DocumentPicker returning a preset path (None = user cancelled)."""

    path: str | None = None
    requested: list[str] = field(default_factory=list)

    async def pick_document(self, *, mime_type: str) -> str | None:
        self.requested.append(mime_type)
        return self.path


class FixedClock:
    """Deterministic Clock; call advance() to move time forward."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now
