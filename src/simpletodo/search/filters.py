# src/simpletodo/search/filters.py

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any

from ..core.timeutil import parse_iso, to_iso
from ..todos.todo_models import Todo, TodoPriority

# python attribute -> persisted camelCase key
_JSON_KEYS = {
    "completed": "completed",
    "category_id": "categoryId",
    "has_category": "hasCategory",
    "tag_ids": "tagIds",
    "priority": "priority",
    "start_date": "startDate",
    "end_date": "endDate",
    "has_description": "hasDescription",
    "has_sub_tasks": "hasSubTasks",
    "has_repeat": "hasRepeat",
    "has_due_date": "hasDueDate",
    "is_overdue": "isOverdue",
    "created_after": "createdAfter",
    "created_before": "createdBefore",
    "updated_after": "updatedAfter",
    "updated_before": "updatedBefore",
}

_DATE_FIELDS = {"start_date", "end_date", "created_after", "created_before", "updated_after", "updated_before"}


@dataclass(frozen=True, slots=True)
class FilterOptions:
    """
    A saved filter predicate. Every field left as None is ignored; the others
    are combined with AND.

    start_date/end_date bound the due date and only apply to tasks that have one.
    """

    completed: bool | None = None
    category_id: str | None = None
    has_category: bool | None = None
    tag_ids: tuple[str, ...] | None = None
    priority: TodoPriority | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    has_description: bool | None = None
    has_sub_tasks: bool | None = None
    has_repeat: bool | None = None
    has_due_date: bool | None = None
    is_overdue: bool | None = None
    created_after: datetime | None = None
    created_before: datetime | None = None
    updated_after: datetime | None = None
    updated_before: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if f.name in _DATE_FIELDS:
                value = to_iso(value)
            elif f.name == "tag_ids":
                value = list(value)
            elif f.name == "priority":
                value = int(value)
            out[_JSON_KEYS[f.name]] = value
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> FilterOptions:
        kwargs: dict[str, Any] = {}
        for name, key in _JSON_KEYS.items():
            value = raw.get(key)
            if value is None:
                continue
            if name in _DATE_FIELDS:
                value = parse_iso(value)
            elif name == "tag_ids":
                value = tuple(str(t) for t in value)
            elif name == "priority":
                value = TodoPriority(int(value))
            kwargs[name] = value
        return cls(**kwargs)

    def matches(self, todo: Todo, now: datetime) -> bool:
        if self.completed is not None and todo.completed != self.completed:
            return False

        if self.category_id and todo.category_id != self.category_id:
            return False
        if self.has_category is not None and bool(todo.category_id) != self.has_category:
            return False

        if self.tag_ids and not all(t in todo.tag_ids for t in self.tag_ids):
            return False

        if self.priority is not None and todo.priority != self.priority:
            return False

        if self.start_date and todo.due_date and todo.due_date < self.start_date:
            return False
        if self.end_date and todo.due_date and todo.due_date > self.end_date:
            return False

        if self.has_description is not None:
            has_description = bool(todo.description and todo.description.strip())
            if has_description != self.has_description:
                return False

        if self.has_sub_tasks is not None and bool(todo.sub_tasks) != self.has_sub_tasks:
            return False

        if self.has_repeat is not None and todo.has_repeat != self.has_repeat:
            return False

        if self.has_due_date is not None and (todo.due_date is not None) != self.has_due_date:
            return False

        if self.is_overdue is not None:
            overdue = not todo.completed and todo.due_date is not None and todo.due_date < now
            if overdue != self.is_overdue:
                return False

        if self.created_after and todo.created_at < self.created_after:
            return False
        if self.created_before and todo.created_at > self.created_before:
            return False
        if self.updated_after and todo.updated_at < self.updated_after:
            return False
        if self.updated_before and todo.updated_at > self.updated_before:
            return False

        return True


def filter_todos(todos: Iterable[Todo], options: FilterOptions, now: datetime) -> list[Todo]:
    return [t for t in todos if options.matches(t, now)]
