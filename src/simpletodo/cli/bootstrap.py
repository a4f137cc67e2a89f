# src/simpletodo/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete collaborators (SQLite KV store, local directories, console
  share/pick) into the services held by AppState.
"""

from __future__ import annotations

import logging

from ..backup.backup_manager import BackupManager
from ..config import get_settings
from ..connectors.local_files import ConsoleShareSink, StaticDocumentPicker
from ..core.ports import Clock, DirectoryStore, DocumentPicker, KeyValueStore, ShareSink
from ..core.state import AppState
from ..core.timeutil import now_utc
from ..exchange.export_service import ExportService
from ..search.quick_search import QuickSearchRegistry
from ..search.search_history import SearchHistoryIndex
from ..storage.directory_store import LocalDirectoryStore
from ..storage.kv_store import SqliteKVStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.kv_db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.documents_dir.mkdir(parents=True, exist_ok=True)
    settings.cache_dir.mkdir(parents=True, exist_ok=True)


def build_state(
    settings,
    *,
    kv: KeyValueStore,
    directory: DirectoryStore,
    sharer: ShareSink,
    picker: DocumentPicker,
    clock: Clock = now_utc,
) -> AppState:
    """Wire services around the given collaborators (used by tests with fakes)."""
    backups = BackupManager(
        kv,
        directory,
        backup_dir=str(settings.backup_dir),
        app_version=settings.app_version,
        retention_days=settings.backup_retention_days,
        clock=clock,
    )
    exports = ExportService(
        backups,
        directory,
        export_dir=str(settings.export_dir),
        app_version=settings.app_version,
        sharer=sharer,
        picker=picker,
        clock=clock,
    )
    return AppState(
        settings=settings,
        kv=kv,
        directory=directory,
        backups=backups,
        exports=exports,
        search_history=SearchHistoryIndex(kv, max_items=settings.search_history_max, clock=clock),
        quick_searches=QuickSearchRegistry(kv, clock=clock),
    )


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    state = build_state(
        settings,
        kv=SqliteKVStore(settings.kv_db_path),
        directory=LocalDirectoryStore(settings.documents_dir, settings.cache_dir),
        sharer=ConsoleShareSink(),
        picker=StaticDocumentPicker(),
    )
    logger.info("State ready (version=%s, backups=%s)", settings.app_version, settings.backup_dir)
    return state
