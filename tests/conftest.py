# tests/conftest.py

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from simpletodo.cli.bootstrap import build_state
from simpletodo.core.state import AppState
from simpletodo.storage.directory_store import LocalDirectoryStore

from .fakes import FakeDocumentPicker, FakeKVStore, FakeShareSink, FixedClock

APP_VERSION = "1.0.0"


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with build_state() and the commands.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    documents_dir = tmp_path / "documents"
    return SimpleNamespace(
        app_name="simpletodo",
        app_version=APP_VERSION,
        log_level="INFO",
        # Paths (tmp per test run)
        data_dir=tmp_path,
        kv_db_path=tmp_path / "kv.sqlite3",
        documents_dir=documents_dir,
        cache_dir=tmp_path / "cache",
        backup_dir=documents_dir / "backups",
        export_dir=documents_dir / "exports",
        # Limits
        backup_retention_days=30,
        search_history_max=100,
        # Features
        auto_backup_enabled=False,
        auto_backup_poll_seconds=60.0,
    )


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 3, 10, 12, 30, 45, 123000, tzinfo=UTC))


@pytest.fixture()
def kv() -> FakeKVStore:
    return FakeKVStore()


@pytest.fixture()
def directory(settings: SimpleNamespace) -> LocalDirectoryStore:
    """
    NOTE: We keep the real filesystem store here (under tmp_path) because
    file naming and copying are part of what we want to test.
    """
    return LocalDirectoryStore(settings.documents_dir, settings.cache_dir)


@pytest.fixture()
def sharer() -> FakeShareSink:
    return FakeShareSink()


@pytest.fixture()
def picker() -> FakeDocumentPicker:
    return FakeDocumentPicker()


@pytest.fixture()
def state(
    settings: SimpleNamespace,
    kv: FakeKVStore,
    directory: LocalDirectoryStore,
    sharer: FakeShareSink,
    picker: FakeDocumentPicker,
    clock: FixedClock,
) -> AppState:
    """AppState wired with deterministic fakes."""
    return build_state(settings, kv=kv, directory=directory, sharer=sharer, picker=picker, clock=clock)


def make_todo(todo_id: str = "t1", title: str = "Buy milk", **overrides) -> dict:
    """Raw task object in the shape the task store persists."""
    todo = {
        "id": todo_id,
        "title": title,
        "completed": False,
        "subTasks": [],
        "tagIds": [],
        "createdAt": "2024-03-01T08:00:00.000Z",
        "updatedAt": "2024-03-02T09:30:00.000Z",
    }
    todo.update(overrides)
    return todo
