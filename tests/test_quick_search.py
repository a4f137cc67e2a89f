# tests/test_quick_search.py

from __future__ import annotations

import json
import re

import pytest

from simpletodo.search.filters import FilterOptions
from simpletodo.search.quick_search import QuickSearchRegistry, new_quick_search_id
from simpletodo.storage.kv_store import QUICK_SEARCHES_KEY
from simpletodo.todos.todo_models import TodoPriority


def test_generated_ids_are_short_base36() -> None:
    ids = {new_quick_search_id() for _ in range(50)}
    assert all(re.fullmatch(r"[a-z0-9]{9}", i) for i in ids)
    assert len(ids) == 50


@pytest.mark.asyncio
async def test_defaults_returned_without_persisting(kv, clock) -> None:
    reg = QuickSearchRegistry(kv, clock=clock)

    items = await reg.get_quick_searches()

    assert [i.id for i in items] == ["today", "overdue", "high_priority", "no_category", "no_date"]
    assert [i.order for i in items] == [0, 1, 2, 3, 4]
    assert items[2].filter.priority is TodoPriority.HIGH
    assert items[3].filter.has_category is False
    assert all(i.filter.completed is False for i in items)
    today = items[0].filter
    assert today.start_date is not None and today.end_date is not None
    assert today.start_date <= clock() <= today.end_date
    assert kv.writes == []


@pytest.mark.asyncio
async def test_add_persists_defaults_plus_new_item(kv, clock) -> None:
    reg = QuickSearchRegistry(kv, clock=clock)

    item = await reg.add_quick_search("Work", "work", FilterOptions(category_id="c1"))

    assert item.order == 5
    stored = json.loads(kv.data[QUICK_SEARCHES_KEY])
    assert len(stored) == 6
    assert stored[-1]["filter"] == {"categoryId": "c1"}
    assert (await reg.get_quick_searches())[-1] == item


@pytest.mark.asyncio
async def test_update_known_and_unknown_ids(kv, clock) -> None:
    reg = QuickSearchRegistry(kv, clock=clock)
    clock.advance(minutes=5)

    assert await reg.update_quick_search("overdue", {"name": "Late", "filter": {"isOverdue": True}}) is True
    items = await reg.get_quick_searches()
    late = next(i for i in items if i.id == "overdue")
    assert late.name == "Late"
    assert late.filter == FilterOptions(is_overdue=True)
    assert late.updated_at == clock()

    writes = len(kv.writes)
    assert await reg.update_quick_search("nope", {"name": "x"}) is False
    assert len(kv.writes) == writes

    with pytest.raises(ValueError):
        await reg.update_quick_search("overdue", {"id": "hijack"})


@pytest.mark.asyncio
async def test_delete_keeps_order_gaps_until_reorder(kv, clock) -> None:
    reg = QuickSearchRegistry(kv, clock=clock)

    await reg.delete_quick_search("overdue")
    items = await reg.get_quick_searches()
    assert [i.order for i in items] == [0, 2, 3, 4]

    dense = await reg.reorder_quick_searches(items)
    assert [i.order for i in dense] == [0, 1, 2, 3]
    assert [i.order for i in await reg.get_quick_searches()] == [0, 1, 2, 3]


@pytest.mark.asyncio
async def test_move_quick_search(kv, clock) -> None:
    reg = QuickSearchRegistry(kv, clock=clock)

    moved = await reg.move_quick_search(4, 0)

    assert [i.id for i in moved] == ["no_date", "today", "overdue", "high_priority", "no_category"]
    assert [i.order for i in moved] == [0, 1, 2, 3, 4]

    with pytest.raises(IndexError):
        await reg.move_quick_search(0, 5)


@pytest.mark.asyncio
async def test_reorder_same_order_is_idempotent(kv, clock) -> None:
    reg = QuickSearchRegistry(kv, clock=clock)
    items = (await reg.get_quick_searches())[:3]

    first = await reg.reorder_quick_searches(items)
    second = await reg.reorder_quick_searches(first)

    assert [i.order for i in second] == [0, 1, 2]
    assert [i.id for i in second] == [i.id for i in items]
