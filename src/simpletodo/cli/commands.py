# src/simpletodo/cli/commands.py

from __future__ import annotations

import inspect
import json
import logging
from collections.abc import Awaitable, Callable
from typing import cast

from ..backup.backup_models import BackupEntry
from ..backup.backup_scheduler import load_backup_config, save_backup_config
from ..connectors.local_files import StaticDocumentPicker
from ..core.errors import TodoDataError
from ..core.state import AppState
from ..search.filters import FilterOptions

CommandEmitter = Callable[[str], None]
CommandResult = str | Awaitable[str]
CommandHandler2 = Callable[[AppState, list[str]], CommandResult]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], CommandResult]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /backup, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Data errors (bad backup, version mismatch, ...) become a one-line reply;
        anything else propagates to the caller.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                result = cast(CommandHandler3, handler)(state, args, emit)
            else:
                result = cast(CommandHandler2, handler)(state, args)
            if inspect.isawaitable(result):
                result = await result
        except TodoDataError as e:
            logger.info("/%s failed: %s", name, e)
            return f"Error: {e}"
        return cast(str, result)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _format_backups(entries: list[BackupEntry]) -> str:
    if not entries:
        return "No backups."
    lines = ["Backups (newest first):"]
    for i, b in enumerate(entries, start=1):
        lines.append(f"{i}. {b.name}  {b.timestamp.astimezone():%Y-%m-%d %H:%M:%S}")
    return "\n".join(lines)


async def _resolve_backup(state: AppState, token: str) -> str:
    """Accept either a path or a 1-based index into /backup list."""
    if token.isdigit():
        entries = await state.backups.get_backup_list()
        idx = int(token) - 1
        if not 0 <= idx < len(entries):
            raise TodoDataError(f"No backup #{token} (have {len(entries)}).")
        return entries[idx].path
    return token


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_status(state: AppState, args: list[str]) -> str:
    settings = state.settings
    history = await state.search_history.get_search_history()
    return (
        "Status:\n"
        f"  Version: {settings.app_version}\n"
        f"  Backups: {settings.backup_dir}\n"
        f"  Exports: {settings.export_dir}\n"
        f"  Search history: {len(history)}/{settings.search_history_max}"
    )


async def _backup_auto(state: AppState, args: list[str]) -> str:
    config = await load_backup_config(state.kv)
    if args:
        flag = args[0].lower()
        if flag not in ("on", "off"):
            return "Usage: /backup auto [on|off] [hours] [max]"
        config.enabled = flag == "on"
        try:
            if len(args) > 1:
                config.interval_hours = max(0.0, float(args[1]))
            if len(args) > 2:
                config.max_backups = max(1, int(args[2]))
        except ValueError:
            return "Hours must be a number and max a whole number."
        await save_backup_config(state.kv, config)

    last = "never"
    if config.last_backup_time is not None:
        last = config.last_backup_time.astimezone().strftime("%Y-%m-%d %H:%M:%S")
    return (
        f"Auto backup: {'on' if config.enabled else 'off'}, every {config.interval_hours:g}h, "
        f"keep {config.max_backups}, last: {last}"
    )


async def cmd_backup(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /backup create | list | restore <n|path> | delete <n|path> | cleanup
    /backup export <n|path> | import <path>
    """
    usage = (
        "Usage:\n"
        "  /backup create            - snapshot tasks/categories/tags\n"
        "  /backup list              - list backups, newest first\n"
        "  /backup restore <n|path>  - restore a backup\n"
        "  /backup delete <n|path>   - delete a backup\n"
        "  /backup cleanup           - delete backups older than the retention window\n"
        "  /backup export <n|path>   - copy a backup out of the backup folder\n"
        "  /backup import <path>     - validate, copy in and restore a backup file\n"
        "  /backup auto [on|off] [hours] [max] - show or change periodic backups"
    )
    if not args:
        return usage

    sub = args[0].lower()
    backups = state.backups

    if sub == "create":
        return f"Backup created: {await backups.create_backup()}"

    if sub in ("list", "ls"):
        return _format_backups(await backups.get_backup_list())

    if sub == "cleanup":
        removed = await backups.cleanup_old_backups()
        return f"Removed {len(removed)} old backup(s)."

    if sub == "auto":
        return await _backup_auto(state, args[1:])

    if len(args) < 2:
        return usage

    if sub == "import":
        return f"Backup imported and restored: {await backups.import_backup(args[1])}"

    path = await _resolve_backup(state, args[1])
    if sub == "restore":
        if emit:
            emit(f"Restoring {path} ...")
        snapshot = await backups.restore_backup(path)
        return f"Restored {len(snapshot.todos)} task(s) from {snapshot.timestamp}."
    if sub in ("delete", "rm"):
        await backups.delete_backup(path)
        return f"Deleted {path}."
    if sub == "export":
        return f"Backup exported: {await backups.export_backup(path)}"

    return usage


async def cmd_export(state: AppState, args: list[str]) -> str:
    """/export json | /export csv"""
    fmt = args[0].lower() if args else ""
    if fmt == "json":
        return f"Exported: {await state.exports.export_to_json()}"
    if fmt == "csv":
        return f"Exported: {await state.exports.export_to_csv()}"
    return "Usage: /export json | /export csv"


async def cmd_import(state: AppState, args: list[str]) -> str:
    """/import json <path> | /import csv <path>"""
    if len(args) < 2 or args[0].lower() not in ("json", "csv"):
        return "Usage: /import json <path> | /import csv <path>"

    picker = StaticDocumentPicker(args[1])
    try:
        if args[0].lower() == "json":
            done = await state.exports.import_from_json(picker)
        else:
            done = await state.exports.import_from_csv(picker)
    except FileNotFoundError:
        return f"No such file: {args[1]}"
    return "Import done." if done else "Import cancelled."


async def cmd_search(state: AppState, args: list[str]) -> str:
    """
    /search add <query> | history | recent [n] | hot [n] | suggest <text>
    /search delete <query> | clear
    """
    usage = "Usage: /search add <q> | history | recent [n] | hot [n] | suggest <text> | delete <q> | clear"
    if not args:
        return usage

    sub = args[0].lower()
    rest = " ".join(args[1:])
    index = state.search_history

    if sub == "add":
        await index.add_search_history(rest)
        return f"Recorded: {rest.strip()}" if rest.strip() else "Nothing to record."

    if sub in ("history", "recent", "hot"):
        limit = int(args[1]) if len(args) > 1 and args[1].isdigit() else 10
        if sub == "history":
            items = (await index.get_search_history())[:limit]
        elif sub == "recent":
            items = await index.get_recent_searches(limit)
        else:
            items = await index.get_hot_searches(limit)
        if not items:
            return "Search history is empty."
        return "\n".join(
            f"{i}. {it.query}  x{it.count}  {it.timestamp.astimezone():%Y-%m-%d %H:%M}"
            for i, it in enumerate(items, start=1)
        )

    if sub == "suggest":
        suggestions = await index.get_search_suggestions(rest)
        return "\n".join(suggestions) if suggestions else "No suggestions."

    if sub == "delete":
        await index.delete_search_history(rest)
        return f"Deleted: {rest}"

    if sub == "clear":
        await index.clear_search_history()
        return "Search history cleared."

    return usage


async def cmd_quick(state: AppState, args: list[str]) -> str:
    """
    /quick list | add <name> <icon> [filter-json] | rename <id> <name>
    /quick delete <id> | move <from> <to>
    """
    usage = (
        "Usage: /quick list | add <name> <icon> [filter-json] | rename <id> <name> | "
        "delete <id> | move <from> <to>"
    )
    registry_ = state.quick_searches
    sub = args[0].lower() if args else "list"

    if sub == "list":
        items = await registry_.get_quick_searches()
        return "\n".join(f"{it.order}. [{it.id}] {it.name} ({it.icon})" for it in items)

    if sub == "add" and len(args) >= 3:
        raw_filter = " ".join(args[3:]) or "{}"
        try:
            flt = FilterOptions.from_dict(json.loads(raw_filter))
        except (TypeError, ValueError) as e:
            return f"Bad filter JSON: {e}"
        item = await registry_.add_quick_search(args[1], args[2], flt)
        return f"Added quick search {item.id} at position {item.order}."

    if sub == "rename" and len(args) >= 3:
        ok = await registry_.update_quick_search(args[1], {"name": " ".join(args[2:])})
        return "Renamed." if ok else f"No quick search with id {args[1]}."

    if sub == "delete" and len(args) >= 2:
        await registry_.delete_quick_search(args[1])
        return f"Deleted {args[1]}."

    if sub == "move" and len(args) >= 3 and args[1].isdigit() and args[2].isdigit():
        try:
            items = await registry_.move_quick_search(int(args[1]), int(args[2]))
        except IndexError as e:
            return str(e)
        return "Order: " + ", ".join(it.name for it in items)

    return usage


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show version, folders and history size.")
registry.register(
    "backup",
    cmd_backup,
    help_text="Backups: /backup create | list | restore | delete | cleanup | export | import.",
)
registry.register("export", cmd_export, help_text="Export all data: /export json | /export csv.")
registry.register("import", cmd_import, help_text="Import data: /import json <path> | /import csv <path>.")
registry.register(
    "search",
    cmd_search,
    help_text="Search history: /search add | history | recent | hot | suggest | delete | clear.",
)
registry.register(
    "quick",
    cmd_quick,
    help_text="Quick searches: /quick list | add | rename | delete | move.",
)
