# src/simpletodo/backup/backup_models.py

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ..core.errors import InvalidBackupFormat
from ..core.timeutil import parse_iso

BACKUP_PREFIX = "todo_backup_"
BACKUP_SUFFIX = ".json"

# Fields a document must carry to be accepted as a backup at all.
REQUIRED_FIELDS = ("version", "timestamp", "todos")


@dataclass(slots=True)
class BackupSnapshot:
    """
    Full serialized state of tasks/categories/tags at one instant.

    Collections are kept as raw JSON objects: the snapshot does not interpret
    tasks, so fields it does not know about survive a backup/restore cycle.
    """

    version: str
    timestamp: str
    todos: list[Any] = field(default_factory=list)
    categories: list[Any] = field(default_factory=list)
    tags: list[Any] = field(default_factory=list)

    @property
    def created_at(self) -> datetime:
        return parse_iso(self.timestamp)

    def to_dict(self) -> dict[str, Any]:
        # Key order is part of the file format.
        return {
            "version": self.version,
            "timestamp": self.timestamp,
            "todos": self.todos,
            "categories": self.categories,
            "tags": self.tags,
        }

    def to_json(self, *, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)

    @classmethod
    def from_dict(cls, data: Any) -> BackupSnapshot:
        if not isinstance(data, dict):
            raise InvalidBackupFormat("Backup document must be a JSON object")

        missing = [name for name in REQUIRED_FIELDS if data.get(name) is None or data.get(name) == ""]
        if missing:
            raise InvalidBackupFormat(f"Invalid backup file format: missing {', '.join(missing)}")

        version = data["version"]
        timestamp = data["timestamp"]
        if not isinstance(version, str) or not isinstance(timestamp, str):
            raise InvalidBackupFormat("Backup version and timestamp must be strings")
        try:
            parse_iso(timestamp)
        except ValueError as e:
            raise InvalidBackupFormat(f"Backup timestamp is not ISO-8601: {timestamp!r}") from e

        lists: dict[str, list[Any]] = {}
        for name in ("todos", "categories", "tags"):
            value = data.get(name, [])
            if value is None:
                value = []
            if not isinstance(value, list):
                raise InvalidBackupFormat(f"Backup field {name!r} must be a list")
            lists[name] = value

        return cls(version=version, timestamp=timestamp, **lists)

    @classmethod
    def from_json(cls, content: str) -> BackupSnapshot:
        try:
            data = json.loads(content)
        except ValueError as e:
            raise InvalidBackupFormat(f"Backup is not valid JSON: {e}") from e
        return cls.from_dict(data)


@dataclass(frozen=True, slots=True)
class BackupEntry:
    """One backup file as shown in the backup list."""

    name: str
    path: str
    timestamp: datetime


def is_backup_file_name(name: str) -> bool:
    return name.startswith(BACKUP_PREFIX) and name.endswith(BACKUP_SUFFIX)
