# src/simpletodo/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then either:
- runs one command given on the command line (`simpletodo /backup list`), or
- starts the console REPL.

When auto backup is enabled in settings the backup scheduler runs as a
background task for the lifetime of the process.
"""

from __future__ import annotations

import asyncio
import logging
import sys

from ..backup.backup_scheduler import run_backup_scheduler
from ..cli.bootstrap import create_initial_state
from ..cli.commands import registry as command_registry
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _run(state: AppState, argv: list[str]) -> int:
    await state.backups.initialize()
    await state.exports.initialize()

    scheduler: asyncio.Task[None] | None = None
    if state.settings.auto_backup_enabled:
        scheduler = asyncio.create_task(
            run_backup_scheduler(
                state.backups,
                state.kv,
                poll_interval_seconds=state.settings.auto_backup_poll_seconds,
            )
        )
        logger.info("Backup scheduler started (poll=%ss).", state.settings.auto_backup_poll_seconds)

    try:
        if argv:
            line = " ".join(argv)
            if not line.startswith("/"):
                line = "/" + line
            reply = await command_registry.handle(state, line, emit=print) or ""
            print(reply)
            return 1 if reply.startswith(("Error:", "Unknown command")) else 0

        await run_console_loop(state)
        return 0
    finally:
        if scheduler is not None:
            scheduler.cancel()
            try:
                await scheduler
            except asyncio.CancelledError:
                pass


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s %s...", settings.app_name, settings.app_version)

    state = create_initial_state(settings=settings)
    args = sys.argv[1:] if argv is None else argv

    try:
        code = asyncio.run(_run(state, args))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
        code = 130

    logger.info("Bye.")
    return code


if __name__ == "__main__":
    sys.exit(main())
