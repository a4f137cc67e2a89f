# src/simpletodo/exchange/export_service.py

"""
Export/import coordinator.

Builds JSON or CSV deliverables on top of BackupManager and imports them back:
- export_to_json / export_to_csv create a fresh backup first, then write an
  export file and hand it to the share sink
- import_from_json / import_from_csv ask the document picker for a file and go
  through BackupManager.import_backup, so every import leaves a backup copy

Sharing is best-effort: the export file stays on disk whether or not sharing
was available or succeeded.
"""

from __future__ import annotations

import json
import logging
import os

from ..backup.backup_manager import BackupManager
from ..backup.backup_models import BackupSnapshot
from ..core.errors import InvalidBackupFormat, StorageUnavailable
from ..core.ports import Clock, DirectoryStore, DocumentPicker, ShareSink
from ..core.timeutil import filename_stamp, now_utc, to_iso
from .csv_codec import decode_todos_csv, encode_todos_csv

logger = logging.getLogger(__name__)

EXPORT_PREFIX = "todo_export_"
TEMP_IMPORT_NAME = "temp_import.json"

JSON_MIME = "application/json"
CSV_MIME = "text/csv"
SHARE_DIALOG_TITLE = "导出待办事项"


class ExportService:
    def __init__(
        self,
        backups: BackupManager,
        directory: DirectoryStore,
        *,
        export_dir: str,
        app_version: str,
        sharer: ShareSink,
        picker: DocumentPicker,
        clock: Clock = now_utc,
    ) -> None:
        self._backups = backups
        self._dir = directory
        self.export_dir = str(export_dir)
        self.app_version = app_version
        self._sharer = sharer
        self._picker = picker
        self._clock = clock

    # ---- helpers ----

    async def _read(self, path: str) -> str:
        try:
            return await self._dir.read_file(path)
        except OSError as e:
            logger.exception("Failed to read %s", path)
            raise StorageUnavailable(f"Cannot read {path}: {e}") from e

    async def _fresh_export_path(self, extension: str) -> str:
        stamp = filename_stamp(self._clock())
        path = os.path.join(self.export_dir, f"{EXPORT_PREFIX}{stamp}.{extension}")
        n = 2
        while await self._dir.exists(path):
            path = os.path.join(self.export_dir, f"{EXPORT_PREFIX}{stamp}_{n}.{extension}")
            n += 1
        return path

    async def _write_export(self, extension: str, content: str) -> str:
        await self.initialize()
        try:
            path = await self._fresh_export_path(extension)
            await self._dir.write_file(path, content)
        except OSError as e:
            logger.exception("Failed to write export in %s", self.export_dir)
            raise StorageUnavailable(f"Cannot write export: {e}") from e
        return path

    async def _share(self, path: str, mime_type: str) -> bool:
        try:
            if not await self._sharer.is_available():
                logger.info("Sharing unavailable; export left at %s", path)
                return False
            await self._sharer.share(path, mime_type=mime_type, dialog_title=SHARE_DIALOG_TITLE)
            return True
        except Exception:
            logger.warning("Sharing %s failed; the export file is kept", path, exc_info=True)
            return False

    async def _snapshot_for_export(self) -> BackupSnapshot:
        backup_path = await self._backups.create_backup()
        return await self._backups.load_snapshot(backup_path)

    # ---- public API ----

    async def initialize(self) -> None:
        try:
            if not await self._dir.exists(self.export_dir):
                await self._dir.mkdir(self.export_dir, intermediates=True)
        except OSError as e:
            logger.exception("Error initializing export folder %s", self.export_dir)
            raise StorageUnavailable(f"Cannot create export directory {self.export_dir}: {e}") from e

    async def export_to_json(self) -> str:
        snapshot = await self._snapshot_for_export()
        path = await self._write_export("json", snapshot.to_json())
        logger.info("Exported JSON path=%s todos=%d", path, len(snapshot.todos))
        await self._share(path, JSON_MIME)
        return path

    async def export_to_csv(self) -> str:
        snapshot = await self._snapshot_for_export()
        path = await self._write_export("csv", encode_todos_csv(snapshot.todos, with_bom=True))
        logger.info("Exported CSV path=%s rows=%d", path, len(snapshot.todos))
        await self._share(path, CSV_MIME)
        return path

    async def import_from_json(self, picker: DocumentPicker | None = None) -> bool:
        """
        Returns False when the pick was cancelled (nothing changes), True after a
        successful import. Shape is checked before any state is touched.
        """
        picked = await (picker or self._picker).pick_document(mime_type=JSON_MIME)
        if picked is None:
            logger.info("JSON import cancelled")
            return False

        content = await self._read(picked)
        try:
            data = json.loads(content)
        except ValueError as e:
            raise InvalidBackupFormat(f"Invalid file format: {e}") from e
        BackupSnapshot.from_dict(data)

        await self._backups.import_backup(picked)
        logger.info("Imported JSON from %s", picked)
        return True

    async def import_from_csv(self, picker: DocumentPicker | None = None) -> bool:
        """
        Decode a CSV export into a snapshot at the current version and import it.

        The snapshot goes through a temporary file in the cache directory that is
        removed whatever the outcome of the import.
        """
        picked = await (picker or self._picker).pick_document(mime_type=CSV_MIME)
        if picked is None:
            logger.info("CSV import cancelled")
            return False

        todos = decode_todos_csv(await self._read(picked))
        snapshot = BackupSnapshot(
            version=self.app_version,
            timestamp=to_iso(self._clock()),
            todos=todos,
            categories=[],
            tags=[],
        )

        temp_path = os.path.join(self._dir.cache_directory, TEMP_IMPORT_NAME)
        try:
            await self._dir.mkdir(self._dir.cache_directory, intermediates=True)
            await self._dir.write_file(temp_path, snapshot.to_json(indent=None))
        except OSError as e:
            logger.exception("Failed to stage CSV import at %s", temp_path)
            raise StorageUnavailable(f"Cannot write {temp_path}: {e}") from e

        try:
            await self._backups.import_backup(temp_path)
        finally:
            try:
                await self._dir.delete_file(temp_path)
            except FileNotFoundError:
                pass
            except OSError:
                logger.warning("Could not remove temporary import file %s", temp_path, exc_info=True)

        logger.info("Imported CSV from %s rows=%d", picked, len(todos))
        return True
