# src/simpletodo/todos/todo_models.py

"""
Read-only view of the task entity owned by the task store.

Backups move tasks around as opaque JSON objects; this model is only used where
fields have to be interpreted (CSV flattening, filter evaluation). Keys that the
model does not know about are kept in `extra` so to_dict() gives them back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any

from ..core.timeutil import parse_iso, to_iso

_KNOWN_KEYS = {
    "id",
    "title",
    "description",
    "completed",
    "dueDate",
    "priority",
    "categoryId",
    "tagIds",
    "subTasks",
    "createdAt",
    "updatedAt",
}


class TodoPriority(IntEnum):
    HIGH = 1
    MEDIUM = 2
    LOW = 3

    @property
    def label(self) -> str:
        return PRIORITY_LABELS[self]

    @classmethod
    def from_label(cls, label: str) -> TodoPriority:
        for prio, text in PRIORITY_LABELS.items():
            if text == label:
                return prio
        raise ValueError(f"unknown priority label: {label!r}")


PRIORITY_LABELS: dict[TodoPriority, str] = {
    TodoPriority.HIGH: "高",
    TodoPriority.MEDIUM: "中",
    TodoPriority.LOW: "低",
}


@dataclass(slots=True)
class SubTask:
    id: str
    title: str
    completed: bool = False
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> SubTask:
        extra = {k: v for k, v in raw.items() if k not in ("id", "title", "completed")}
        return cls(
            id=str(raw["id"]),
            title=str(raw.get("title") or ""),
            completed=bool(raw.get("completed", False)),
            extra=extra,
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "title": self.title, "completed": self.completed, **self.extra}


@dataclass(slots=True)
class Todo:
    id: str
    title: str
    created_at: datetime
    updated_at: datetime
    completed: bool = False
    description: str | None = None
    due_date: datetime | None = None
    priority: TodoPriority | None = None
    category_id: str | None = None
    tag_ids: list[str] = field(default_factory=list)
    sub_tasks: list[SubTask] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Todo:
        """Build from the camelCase JSON form. Raises KeyError/ValueError on bad input."""
        due = raw.get("dueDate")
        prio = raw.get("priority")
        return cls(
            id=str(raw["id"]),
            title=str(raw["title"]),
            description=raw.get("description") or None,
            completed=bool(raw.get("completed", False)),
            due_date=parse_iso(due) if due else None,
            priority=TodoPriority(int(prio)) if prio else None,
            category_id=raw.get("categoryId") or None,
            tag_ids=[str(t) for t in raw.get("tagIds") or []],
            sub_tasks=[SubTask.from_dict(s) for s in raw.get("subTasks") or []],
            created_at=parse_iso(raw["createdAt"]),
            updated_at=parse_iso(raw["updatedAt"]),
            extra={k: v for k, v in raw.items() if k not in _KNOWN_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        """camelCase JSON form; unset optionals are omitted."""
        out: dict[str, Any] = {"id": self.id, "title": self.title}
        if self.description is not None:
            out["description"] = self.description
        out["completed"] = self.completed
        if self.due_date is not None:
            out["dueDate"] = to_iso(self.due_date)
        if self.priority is not None:
            out["priority"] = int(self.priority)
        out["subTasks"] = [s.to_dict() for s in self.sub_tasks]
        if self.category_id is not None:
            out["categoryId"] = self.category_id
        out["tagIds"] = list(self.tag_ids)
        out["createdAt"] = to_iso(self.created_at)
        out["updatedAt"] = to_iso(self.updated_at)
        out.update(self.extra)
        return out

    @property
    def has_repeat(self) -> bool:
        return bool(self.extra.get("repeat"))
