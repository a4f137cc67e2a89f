# src/simpletodo/backup/backup_manager.py

"""
Backup manager.

Creates, lists, restores and deletes versioned snapshot files of the task,
category and tag collections.

Guarantees and known limits:
- one new file per create_backup(); existing files are never overwritten
- restore checks shape and version before the first KV write
- the three KV keys are written independently: a failure mid-restore leaves
  partially restored state and the error propagates to the caller
- listing reads every backup's embedded timestamp; one unreadable file fails
  the whole listing
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from datetime import datetime, timedelta
from typing import Any

from ..core.errors import DeleteFailed, ParseFailure, StorageUnavailable, VersionMismatch
from ..core.ports import Clock, DirectoryStore, KeyValueStore
from ..core.timeutil import filename_stamp, now_utc, to_iso
from ..storage.kv_store import CATEGORIES_KEY, TAGS_KEY, TODOS_KEY
from .backup_models import BACKUP_PREFIX, BACKUP_SUFFIX, BackupEntry, BackupSnapshot, is_backup_file_name

logger = logging.getLogger(__name__)

COLLECTION_KEYS = (TODOS_KEY, CATEGORIES_KEY, TAGS_KEY)


def dump_collection(items: list[Any]) -> str:
    """Compact JSON, the form the task store itself writes under its keys."""
    return json.dumps(items, ensure_ascii=False, separators=(",", ":"))


class BackupManager:
    def __init__(
        self,
        kv: KeyValueStore,
        directory: DirectoryStore,
        *,
        backup_dir: str,
        app_version: str,
        retention_days: int = 30,
        clock: Clock = now_utc,
    ) -> None:
        self._kv = kv
        self._dir = directory
        self.backup_dir = str(backup_dir)
        self.app_version = app_version
        self.retention_days = int(retention_days)
        self._clock = clock

    # ---- helpers ----

    def _path_for(self, name: str) -> str:
        return os.path.join(self.backup_dir, name)

    async def _fresh_backup_path(self, now: datetime) -> str:
        stamp = filename_stamp(now)
        path = self._path_for(f"{BACKUP_PREFIX}{stamp}{BACKUP_SUFFIX}")
        n = 2
        while await self._dir.exists(path):
            path = self._path_for(f"{BACKUP_PREFIX}{stamp}_{n}{BACKUP_SUFFIX}")
            n += 1
        return path

    async def _read_collection(self, key: str) -> list[Any]:
        raw = await self._kv.get(key)
        if raw is None:
            return []
        try:
            value = json.loads(raw)
        except ValueError as e:
            raise ParseFailure(f"Stored collection {key} is not valid JSON") from e
        if not isinstance(value, list):
            raise ParseFailure(f"Stored collection {key} is not a list")
        return value

    async def _read_text(self, path: str) -> str:
        try:
            return await self._dir.read_file(path)
        except OSError as e:
            logger.exception("Failed to read backup file %s", path)
            raise StorageUnavailable(f"Cannot read {path}: {e}") from e

    async def load_snapshot(self, path: str) -> BackupSnapshot:
        """Read and shape-check a backup file (no version check)."""
        return BackupSnapshot.from_json(await self._read_text(path))

    def check_version(self, snapshot: BackupSnapshot) -> None:
        if snapshot.version != self.app_version:
            raise VersionMismatch(expected=self.app_version, found=snapshot.version)

    # ---- public API ----

    async def initialize(self) -> None:
        try:
            if not await self._dir.exists(self.backup_dir):
                await self._dir.mkdir(self.backup_dir, intermediates=True)
                logger.info("Created backup directory %s", self.backup_dir)
        except OSError as e:
            logger.exception("Error initializing backup folder %s", self.backup_dir)
            raise StorageUnavailable(f"Cannot create backup directory {self.backup_dir}: {e}") from e

    async def create_backup(self, *, now: datetime | None = None) -> str:
        now = now or self._clock()
        todos, categories, tags = await asyncio.gather(
            *(self._read_collection(key) for key in COLLECTION_KEYS)
        )
        snapshot = BackupSnapshot(
            version=self.app_version,
            timestamp=to_iso(now),
            todos=todos,
            categories=categories,
            tags=tags,
        )

        await self.initialize()
        try:
            path = await self._fresh_backup_path(now)
            await self._dir.write_file(path, snapshot.to_json())
        except OSError as e:
            logger.exception("Error creating backup in %s", self.backup_dir)
            raise StorageUnavailable(f"Cannot write backup: {e}") from e

        logger.info(
            "Backup created path=%s todos=%d categories=%d tags=%d",
            path,
            len(todos),
            len(categories),
            len(tags),
        )
        return path

    async def restore_backup(self, path: str) -> BackupSnapshot:
        snapshot = await self.load_snapshot(path)
        self.check_version(snapshot)

        values = (snapshot.todos, snapshot.categories, snapshot.tags)
        await asyncio.gather(
            *(self._kv.set(key, dump_collection(items)) for key, items in zip(COLLECTION_KEYS, values))
        )
        logger.info("Backup restored path=%s todos=%d", path, len(snapshot.todos))
        return snapshot

    async def get_backup_list(self) -> list[BackupEntry]:
        try:
            names = await self._dir.list_dir(self.backup_dir)
        except OSError as e:
            logger.exception("Error listing backups in %s", self.backup_dir)
            raise StorageUnavailable(f"Cannot list {self.backup_dir}: {e}") from e

        async def _entry(name: str) -> BackupEntry:
            path = self._path_for(name)
            snapshot = await self.load_snapshot(path)
            return BackupEntry(name=name, path=path, timestamp=snapshot.created_at)

        entries = await asyncio.gather(*(_entry(n) for n in names if is_backup_file_name(n)))
        return sorted(entries, key=lambda e: e.timestamp, reverse=True)

    async def delete_backup(self, path: str) -> None:
        try:
            if not await self._dir.exists(path):
                raise DeleteFailed(path, "no such file")
            await self._dir.delete_file(path)
        except OSError as e:
            logger.exception("Error deleting backup %s", path)
            raise DeleteFailed(path, str(e)) from e
        logger.info("Backup deleted path=%s", path)

    async def cleanup_old_backups(self, *, now: datetime | None = None) -> list[BackupEntry]:
        """Delete backups whose embedded timestamp is older than the retention window."""
        cutoff = (now or self._clock()) - timedelta(days=self.retention_days)
        old = [b for b in await self.get_backup_list() if b.timestamp < cutoff]
        await asyncio.gather(*(self.delete_backup(b.path) for b in old))
        if old:
            logger.info("Cleaned up %d backups older than %s", len(old), to_iso(cutoff))
        return old

    async def prune_backups(self, max_backups: int) -> list[BackupEntry]:
        """Keep only the newest max_backups backups."""
        backups = await self.get_backup_list()
        extra = backups[max(0, int(max_backups)):]
        await asyncio.gather(*(self.delete_backup(b.path) for b in extra))
        if extra:
            logger.info("Pruned %d backups (keeping %d)", len(extra), max_backups)
        return extra

    async def export_backup(self, path: str, *, now: datetime | None = None) -> str:
        """Copy a backup out of the backup directory under a non-prefixed name."""
        now = now or self._clock()
        export_path = os.path.join(self._dir.document_directory, f"{filename_stamp(now)}_todo_backup.json")
        try:
            await self._dir.copy_file(path, export_path)
        except OSError as e:
            logger.exception("Error exporting backup %s", path)
            raise StorageUnavailable(f"Cannot export {path}: {e}") from e
        logger.info("Backup exported %s -> %s", path, export_path)
        return export_path

    async def import_backup(self, import_path: str, *, now: datetime | None = None) -> str:
        """
        Validate an outside backup file, copy it into the backup directory, restore it.

        Shape and version are both checked before the copy, so a rejected file
        leaves neither a copy nor any KV change behind.
        """
        snapshot = await self.load_snapshot(import_path)
        self.check_version(snapshot)

        await self.initialize()
        try:
            backup_path = await self._fresh_backup_path(now or self._clock())
            await self._dir.copy_file(import_path, backup_path)
        except OSError as e:
            logger.exception("Error importing backup %s", import_path)
            raise StorageUnavailable(f"Cannot import {import_path}: {e}") from e

        await self.restore_backup(backup_path)
        logger.info("Backup imported %s -> %s", import_path, backup_path)
        return backup_path
