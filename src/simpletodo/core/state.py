# src/simpletodo/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..backup.backup_manager import BackupManager
from ..exchange.export_service import ExportService
from ..search.quick_search import QuickSearchRegistry
from ..search.search_history import SearchHistoryIndex
from .ports import DirectoryStore, KeyValueStore


@dataclass
class AppState:
    """
    Explicitly constructed service objects for one process.

    Built once by the composition root (cli/bootstrap.py) and passed by reference
    to whoever handles a request; tests build as many as they like.
    """

    # Settings object (real Settings or a SimpleNamespace in tests).
    settings: Any

    kv: KeyValueStore
    directory: DirectoryStore

    backups: BackupManager
    exports: ExportService
    search_history: SearchHistoryIndex
    quick_searches: QuickSearchRegistry
