# src/simpletodo/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Services never read settings themselves: values are passed to constructors.
- Every path lives under one local data dir unless overridden.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from . import __version__

ENV_PREFIX = "SIMPLETODO"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    app_version: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    kv_db_path: Path
    documents_dir: Path
    cache_dir: Path
    backup_dir: Path
    export_dir: Path

    # ---- Retention / limits ----
    backup_retention_days: int
    search_history_max: int

    # ---- Auto backup ----
    auto_backup_enabled: bool
    auto_backup_poll_seconds: float

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "simpletodo") or "simpletodo"
        app_version = _env(_k("APP_VERSION"), __version__) or __version__
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/simpletodo"))
        kv_db_path = _env_path(_k("KV_DB_PATH"), data_dir / "kv.sqlite3")
        documents_dir = _env_path(_k("DOCUMENTS_DIR"), data_dir / "documents")
        cache_dir = _env_path(_k("CACHE_DIR"), data_dir / "cache")
        backup_dir = _env_path(_k("BACKUP_DIR"), documents_dir / "backups")
        export_dir = _env_path(_k("EXPORT_DIR"), documents_dir / "exports")

        backup_retention_days = max(1, _env_int(_k("BACKUP_RETENTION_DAYS"), 30))
        search_history_max = max(1, _env_int(_k("SEARCH_HISTORY_MAX"), 100))

        auto_backup_enabled = _env_bool(_k("AUTO_BACKUP"), False)
        auto_backup_poll_seconds = _env_float(_k("AUTO_BACKUP_POLL_SECONDS"), 60.0)

        return Settings(
            app_name=app_name,
            app_version=app_version,
            log_level=log_level,
            data_dir=data_dir,
            kv_db_path=kv_db_path,
            documents_dir=documents_dir,
            cache_dir=cache_dir,
            backup_dir=backup_dir,
            export_dir=export_dir,
            backup_retention_days=backup_retention_days,
            search_history_max=search_history_max,
            auto_backup_enabled=auto_backup_enabled,
            auto_backup_poll_seconds=auto_backup_poll_seconds,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
