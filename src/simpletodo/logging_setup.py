# src/simpletodo/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path


class _ConsoleNoiseFilter(logging.Filter):
    """Console filter: app records pass, scheduler ticks from WARNING, anything else from ERROR."""

    QUIET = {"simpletodo.backup.backup_scheduler": logging.WARNING}

    def filter(self, record: logging.LogRecord) -> bool:
        if not record.name.startswith("simpletodo."):
            return record.levelno >= logging.ERROR
        return record.levelno >= self.QUIET.get(record.name, logging.NOTSET)


def setup_logging(
    *,
    log_dir: str | Path = ".local/simpletodo",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> None:
    """Install the filtered stderr handler and the DEBUG file handler (<log_dir>/simpletodo.log).

    Replaces any handlers already on the root logger, so calling it twice is harmless.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "simpletodo.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Console (interactive)
    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    # File (everything)
    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    # Route warnings.warn(...) into logging as 'py.warnings'
    logging.captureWarnings(True)
