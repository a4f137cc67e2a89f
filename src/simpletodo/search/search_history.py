# src/simpletodo/search/search_history.py

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..core.errors import ParseFailure
from ..core.ports import Clock, KeyValueStore
from ..core.timeutil import now_utc, parse_iso, to_iso
from ..storage.kv_store import SEARCH_HISTORY_KEY

logger = logging.getLogger(__name__)

MAX_HISTORY_ITEMS = 100


@dataclass(slots=True)
class SearchHistoryItem:
    query: str
    timestamp: datetime
    count: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {"query": self.query, "timestamp": to_iso(self.timestamp), "count": self.count}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> SearchHistoryItem:
        return cls(
            query=str(raw["query"]),
            timestamp=parse_iso(str(raw["timestamp"])),
            count=max(1, int(raw.get("count", 1))),
        )


class SearchHistoryIndex:
    """
    Free-text search history with frequency (count) and recency (timestamp).

    Storage order:
    - a new query is prepended
    - a repeated query is updated in place (count += 1, timestamp refreshed)
    - when over capacity, the tail item is dropped

    So eviction follows insertion position, not recency: a frequently repeated
    query that was first searched long ago can still be evicted before a newer
    one-off query. Display order never depends on storage order; every view
    below re-sorts.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        *,
        max_items: int = MAX_HISTORY_ITEMS,
        clock: Clock = now_utc,
    ) -> None:
        self._kv = kv
        self.max_items = max(1, int(max_items))
        self._clock = clock

    async def _save(self, history: list[SearchHistoryItem]) -> None:
        blob = json.dumps([item.to_dict() for item in history], ensure_ascii=False)
        await self._kv.set(SEARCH_HISTORY_KEY, blob)

    async def get_search_history(self) -> list[SearchHistoryItem]:
        """All items in storage order."""
        raw = await self._kv.get(SEARCH_HISTORY_KEY)
        if raw is None:
            return []
        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError("search history is not a list")
            return [SearchHistoryItem.from_dict(item) for item in data]
        except (KeyError, TypeError, ValueError) as e:
            logger.exception("Stored search history is unreadable")
            raise ParseFailure(f"Stored search history is invalid: {e}") from e

    async def add_search_history(self, query: str) -> None:
        query = (query or "").strip()
        if not query:
            return

        history = await self.get_search_history()
        now = self._clock()

        existing = next((item for item in history if item.query == query), None)
        if existing is not None:
            existing.count += 1
            existing.timestamp = now
        else:
            history.insert(0, SearchHistoryItem(query=query, timestamp=now, count=1))
            while len(history) > self.max_items:
                dropped = history.pop()
                logger.debug("Search history full; evicted %r", dropped.query)

        await self._save(history)

    async def get_recent_searches(self, limit: int = 10) -> list[SearchHistoryItem]:
        history = await self.get_search_history()
        return sorted(history, key=lambda item: item.timestamp, reverse=True)[: max(0, limit)]

    async def get_hot_searches(self, limit: int = 10) -> list[SearchHistoryItem]:
        # sorted() is stable: equal counts keep storage order (not a contract).
        history = await self.get_search_history()
        return sorted(history, key=lambda item: item.count, reverse=True)[: max(0, limit)]

    async def get_search_suggestions(self, query: str, limit: int = 5) -> list[str]:
        needle = (query or "").lower()
        history = await self.get_search_history()
        matches = [item for item in history if needle in item.query.lower()]
        matches.sort(key=lambda item: item.count, reverse=True)
        return [item.query for item in matches[: max(0, limit)]]

    async def delete_search_history(self, query: str) -> None:
        history = await self.get_search_history()
        kept = [item for item in history if item.query != query]
        if len(kept) != len(history):
            await self._save(kept)

    async def clear_search_history(self) -> None:
        await self._kv.remove(SEARCH_HISTORY_KEY)
        logger.info("Search history cleared")
