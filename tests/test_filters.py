# tests/test_filters.py

from __future__ import annotations

from datetime import UTC, datetime

from simpletodo.search.filters import FilterOptions, filter_todos
from simpletodo.todos.todo_models import SubTask, Todo, TodoPriority

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=UTC)


def _todo(todo_id: str, **kwargs) -> Todo:
    base = dict(
        id=todo_id,
        title=todo_id,
        created_at=datetime(2024, 3, 1, tzinfo=UTC),
        updated_at=datetime(2024, 3, 2, tzinfo=UTC),
    )
    base.update(kwargs)
    return Todo(**base)


TODOS = [
    _todo("done", completed=True, category_id="work"),
    _todo("overdue", due_date=datetime(2024, 3, 9, tzinfo=UTC), priority=TodoPriority.HIGH),
    _todo("later", due_date=datetime(2024, 3, 20, tzinfo=UTC), tag_ids=["a", "b"], description="notes"),
    _todo("bare", sub_tasks=[SubTask(id="s", title="step")], extra={"repeat": {"type": "daily"}}),
]


def _ids(options: FilterOptions) -> list[str]:
    return [t.id for t in filter_todos(TODOS, options, NOW)]


def test_empty_filter_matches_all() -> None:
    assert _ids(FilterOptions()) == ["done", "overdue", "later", "bare"]


def test_flags_combine_with_and() -> None:
    assert _ids(FilterOptions(completed=False)) == ["overdue", "later", "bare"]
    assert _ids(FilterOptions(completed=False, is_overdue=True)) == ["overdue"]
    assert _ids(FilterOptions(is_overdue=False)) == ["done", "later", "bare"]
    assert _ids(FilterOptions(has_due_date=False)) == ["done", "bare"]
    assert _ids(FilterOptions(priority=TodoPriority.HIGH)) == ["overdue"]
    assert _ids(FilterOptions(has_category=False)) == ["overdue", "later", "bare"]
    assert _ids(FilterOptions(category_id="work")) == ["done"]
    assert _ids(FilterOptions(tag_ids=("a",))) == ["later"]
    assert _ids(FilterOptions(tag_ids=("a", "z"))) == []
    assert _ids(FilterOptions(has_description=True)) == ["later"]
    assert _ids(FilterOptions(has_sub_tasks=True)) == ["bare"]
    assert _ids(FilterOptions(has_repeat=True)) == ["bare"]


def test_due_range_ignores_tasks_without_due_date() -> None:
    options = FilterOptions(
        start_date=datetime(2024, 3, 10, tzinfo=UTC),
        end_date=datetime(2024, 3, 31, tzinfo=UTC),
    )
    assert _ids(options) == ["done", "later", "bare"]


def test_created_updated_bounds() -> None:
    assert _ids(FilterOptions(created_after=datetime(2024, 3, 2, tzinfo=UTC))) == []
    assert _ids(FilterOptions(updated_before=datetime(2024, 3, 2, tzinfo=UTC))) == [t.id for t in TODOS]


def test_dict_form_uses_camel_case_and_skips_unset() -> None:
    options = FilterOptions(completed=False, has_category=False, priority=TodoPriority.HIGH, tag_ids=("a",))
    raw = options.to_dict()

    assert raw == {"completed": False, "hasCategory": False, "tagIds": ["a"], "priority": 1}
    assert FilterOptions.from_dict(raw) == options


def test_from_dict_parses_dates() -> None:
    options = FilterOptions.from_dict({"startDate": "2024-03-10T00:00:00.000Z", "isOverdue": True})
    assert options.start_date == datetime(2024, 3, 10, tzinfo=UTC)
    assert options.is_overdue is True
