# src/simpletodo/search/quick_search.py

from __future__ import annotations

import json
import logging
import secrets
import string
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from datetime import datetime, time
from typing import Any

from ..core.errors import ParseFailure
from ..core.ports import Clock, KeyValueStore
from ..core.timeutil import now_utc, parse_iso, to_iso
from ..storage.kv_store import QUICK_SEARCHES_KEY
from ..todos.todo_models import TodoPriority
from .filters import FilterOptions

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits
_ID_LENGTH = 9

UPDATABLE_FIELDS = frozenset({"name", "icon", "filter", "order"})


def new_quick_search_id() -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_LENGTH))


@dataclass(frozen=True, slots=True)
class QuickSearchItem:
    id: str
    name: str
    icon: str
    filter: FilterOptions
    order: int
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "filter": self.filter.to_dict(),
            "order": self.order,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> QuickSearchItem:
        return cls(
            id=str(raw["id"]),
            name=str(raw["name"]),
            icon=str(raw.get("icon") or ""),
            filter=FilterOptions.from_dict(raw.get("filter") or {}),
            order=int(raw.get("order", 0)),
            created_at=parse_iso(raw["createdAt"]),
            updated_at=parse_iso(raw["updatedAt"]),
        )


def default_quick_searches(now: datetime) -> list[QuickSearchItem]:
    """The five built-ins shown while the user has saved nothing."""
    local = now.astimezone()
    day_start = datetime.combine(local.date(), time.min, tzinfo=local.tzinfo)
    day_end = datetime.combine(local.date(), time.max, tzinfo=local.tzinfo)

    specs = [
        ("today", "今日待办", "today", FilterOptions(completed=False, start_date=day_start, end_date=day_end)),
        ("overdue", "已逾期", "warning", FilterOptions(completed=False, is_overdue=True)),
        ("high_priority", "高优先级", "priority-high", FilterOptions(completed=False, priority=TodoPriority.HIGH)),
        ("no_category", "未分类", "folder-off", FilterOptions(completed=False, has_category=False)),
        ("no_date", "无截止日期", "event-busy", FilterOptions(completed=False, has_due_date=False)),
    ]
    return [
        QuickSearchItem(id=qid, name=name, icon=icon, filter=flt, order=i, created_at=now, updated_at=now)
        for i, (qid, name, icon, flt) in enumerate(specs)
    ]


class QuickSearchRegistry:
    """
    User-ordered list of named, saved filters.

    Notes:
    - while nothing is persisted, reads return the built-ins without saving them;
      the first mutation persists whatever list the user was looking at
    - update with an unknown id changes nothing and raises nothing (returns False)
    - delete does not renumber `order`; call reorder_quick_searches() for a dense 0..n-1
    """

    def __init__(self, kv: KeyValueStore, *, clock: Clock = now_utc) -> None:
        self._kv = kv
        self._clock = clock

    async def _load(self) -> list[QuickSearchItem] | None:
        raw = await self._kv.get(QUICK_SEARCHES_KEY)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError("quick searches are not a list")
            return [QuickSearchItem.from_dict(item) for item in data]
        except (KeyError, TypeError, ValueError) as e:
            logger.exception("Stored quick searches are unreadable")
            raise ParseFailure(f"Stored quick searches are invalid: {e}") from e

    async def _save(self, items: Sequence[QuickSearchItem]) -> None:
        blob = json.dumps([item.to_dict() for item in items], ensure_ascii=False)
        await self._kv.set(QUICK_SEARCHES_KEY, blob)

    async def get_quick_searches(self) -> list[QuickSearchItem]:
        items = await self._load()
        if items is None:
            return default_quick_searches(self._clock())
        return items

    async def add_quick_search(self, name: str, icon: str, filter: FilterOptions) -> QuickSearchItem:
        items = await self.get_quick_searches()
        now = self._clock()
        item = QuickSearchItem(
            id=new_quick_search_id(),
            name=name,
            icon=icon,
            filter=filter,
            order=len(items),
            created_at=now,
            updated_at=now,
        )
        items.append(item)
        await self._save(items)
        logger.info("Quick search added id=%s name=%r", item.id, name)
        return item

    async def update_quick_search(self, quick_search_id: str, updates: Mapping[str, Any]) -> bool:
        unknown = set(updates) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update quick search fields: {', '.join(sorted(unknown))}")

        items = await self.get_quick_searches()
        for idx, item in enumerate(items):
            if item.id != quick_search_id:
                continue
            changes = dict(updates)
            if isinstance(changes.get("filter"), Mapping):
                changes["filter"] = FilterOptions.from_dict(dict(changes["filter"]))
            items[idx] = replace(item, **changes, updated_at=self._clock())
            await self._save(items)
            return True

        logger.debug("update_quick_search: no item with id=%s", quick_search_id)
        return False

    async def delete_quick_search(self, quick_search_id: str) -> None:
        items = await self.get_quick_searches()
        await self._save([item for item in items if item.id != quick_search_id])

    async def reorder_quick_searches(self, items: Sequence[QuickSearchItem]) -> list[QuickSearchItem]:
        now = self._clock()
        reordered = [replace(item, order=index, updated_at=now) for index, item in enumerate(items)]
        await self._save(reordered)
        return reordered

    async def move_quick_search(self, from_index: int, to_index: int) -> list[QuickSearchItem]:
        """Drag-and-drop move of one element, then a full reorder."""
        items = await self.get_quick_searches()
        if not (0 <= from_index < len(items)) or not (0 <= to_index < len(items)):
            raise IndexError(f"move {from_index}->{to_index} out of range for {len(items)} items")
        item = items.pop(from_index)
        items.insert(to_index, item)
        return await self.reorder_quick_searches(items)
