# src/simpletodo/backup/backup_scheduler.py

"""
Periodic backup scheduler.

A small polling loop that:
- loads the persisted BackupConfig,
- creates a backup when auto backup is enabled and the interval has elapsed,
- stamps last_backup_time and keeps only the newest max_backups files.

It is opt-in: nothing in the services starts it. The 30-day retention cleanup
stays a separate, caller-invoked operation.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from ..core.errors import ParseFailure
from ..core.ports import Clock, KeyValueStore
from ..core.timeutil import now_utc, parse_iso, to_iso
from ..storage.kv_store import BACKUP_CONFIG_KEY
from .backup_manager import BackupManager

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BackupConfig:
    enabled: bool = False
    interval_hours: float = 24.0
    max_backups: int = 7
    last_backup_time: datetime | None = None

    def to_dict(self) -> dict[str, object]:
        out: dict[str, object] = {
            "enabled": self.enabled,
            "interval": self.interval_hours,
            "maxBackups": self.max_backups,
        }
        if self.last_backup_time is not None:
            out["lastBackupTime"] = to_iso(self.last_backup_time)
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, object]) -> BackupConfig:
        last = raw.get("lastBackupTime")
        return cls(
            enabled=bool(raw.get("enabled", False)),
            interval_hours=float(raw.get("interval", 24.0)),  # type: ignore[arg-type]
            max_backups=int(raw.get("maxBackups", 7)),  # type: ignore[call-overload]
            last_backup_time=parse_iso(last) if isinstance(last, str) and last else None,
        )


async def load_backup_config(kv: KeyValueStore) -> BackupConfig:
    raw = await kv.get(BACKUP_CONFIG_KEY)
    if raw is None:
        return BackupConfig()
    try:
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError("backup config is not an object")
        return BackupConfig.from_dict(data)
    except (TypeError, ValueError) as e:
        raise ParseFailure(f"Stored backup config is invalid: {e}") from e


async def save_backup_config(kv: KeyValueStore, config: BackupConfig) -> None:
    await kv.set(BACKUP_CONFIG_KEY, json.dumps(config.to_dict()))


def backup_is_due(config: BackupConfig, now: datetime) -> bool:
    if not config.enabled:
        return False
    if config.last_backup_time is None:
        return True
    return now - config.last_backup_time >= timedelta(hours=config.interval_hours)


async def run_backup_once(manager: BackupManager, kv: KeyValueStore, *, now: datetime) -> str | None:
    """
    One scheduler tick. Returns the new backup path, or None when nothing was due.
    """
    config = await load_backup_config(kv)
    if not backup_is_due(config, now):
        return None

    path = await manager.create_backup(now=now)
    config.last_backup_time = now
    await save_backup_config(kv, config)
    await manager.prune_backups(config.max_backups)
    logger.info("Auto backup done path=%s next_in=%sh", path, config.interval_hours)
    return path


async def run_backup_scheduler(
    manager: BackupManager,
    kv: KeyValueStore,
    *,
    poll_interval_seconds: float = 60.0,
    clock: Clock = now_utc,
) -> None:
    """
    Poll forever; every poll_interval_seconds run one tick.

    Failures are logged and the loop keeps going.
    To stop the scheduler, cancel the coroutine/task.
    """
    sleep_s = max(0.01, float(poll_interval_seconds))

    while True:
        try:
            await run_backup_once(manager, kv, now=clock())
        except Exception:
            logger.exception("Auto backup tick failed")

        await asyncio.sleep(sleep_s)
