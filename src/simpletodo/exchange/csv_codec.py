# src/simpletodo/exchange/csv_codec.py

"""
Flat CSV form of the task list.

One row per task, columns in a fixed order. Sub-tasks are dropped and only
category/tag ids travel (as opaque strings), so decode(encode(x)) loses
exactly that, plus sub-second precision of timestamps.

Reading and writing both go through the csv module (quote char '"', doubled
quotes inside quoted fields), so commas, quotes and line breaks inside titles
round-trip. Files written by older versions, which always quoted the title,
read back the same way.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable
from typing import Any

from ..core.errors import ParseFailure
from ..core.timeutil import format_csv_datetime, parse_csv_datetime
from ..todos.todo_models import Todo, TodoPriority

BOM = "\ufeff"

CSV_HEADER = ["ID", "标题", "描述", "完成状态", "截止日期", "优先级", "分类", "标签", "创建时间", "更新时间"]

COMPLETED_YES = "是"
COMPLETED_NO = "否"
TAG_SEPARATOR = ";"


def todo_to_row(todo: Todo) -> list[str]:
    return [
        todo.id,
        todo.title,
        todo.description or "",
        COMPLETED_YES if todo.completed else COMPLETED_NO,
        format_csv_datetime(todo.due_date) if todo.due_date else "",
        todo.priority.label if todo.priority else "",
        todo.category_id or "",
        TAG_SEPARATOR.join(todo.tag_ids),
        format_csv_datetime(todo.created_at),
        format_csv_datetime(todo.updated_at),
    ]


def encode_todos_csv(todos: Iterable[dict[str, Any]], *, with_bom: bool = True) -> str:
    """Flatten raw task objects (as stored in a snapshot) into CSV text."""
    buf = io.StringIO()
    writer = csv.writer(buf, delimiter=",", quotechar='"', quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for index, raw in enumerate(todos):
        try:
            todo = Todo.from_dict(raw)
        except (KeyError, TypeError, ValueError) as e:
            raise ParseFailure(f"Task #{index} cannot be exported: {e}") from e
        writer.writerow(todo_to_row(todo))
    text = buf.getvalue()
    return BOM + text if with_bom else text


def row_to_todo(row: list[str]) -> Todo:
    (
        todo_id,
        title,
        description,
        completed,
        due_date,
        priority,
        category_id,
        tag_ids,
        created_at,
        updated_at,
    ) = row[: len(CSV_HEADER)]

    return Todo(
        id=todo_id,
        title=title,
        description=description or None,
        completed=completed == COMPLETED_YES,
        due_date=parse_csv_datetime(due_date) if due_date else None,
        priority=TodoPriority.from_label(priority) if priority else None,
        category_id=category_id or None,
        tag_ids=[t for t in tag_ids.split(TAG_SEPARATOR) if t] if tag_ids else [],
        sub_tasks=[],
        created_at=parse_csv_datetime(created_at),
        updated_at=parse_csv_datetime(updated_at),
    )


def decode_todos_csv(text: str) -> list[dict[str, Any]]:
    """
    Parse CSV text back into raw task objects.

    The header line is skipped (not validated beyond being present); blank lines
    are ignored. Any short row or unparseable value raises ParseFailure.
    """
    if text.startswith(BOM):
        text = text[len(BOM):]

    try:
        rows = list(csv.reader(io.StringIO(text, newline=""), delimiter=",", quotechar='"'))
    except csv.Error as e:
        raise ParseFailure(f"CSV is malformed: {e}") from e

    if not rows:
        raise ParseFailure("CSV is empty (no header line)")

    todos: list[dict[str, Any]] = []
    for line_no, row in enumerate(rows[1:], start=2):
        if not row or all(not cell.strip() for cell in row):
            continue
        if len(row) < len(CSV_HEADER):
            raise ParseFailure(f"CSV row {line_no} has {len(row)} columns, expected {len(CSV_HEADER)}")
        try:
            todos.append(row_to_todo(row).to_dict())
        except ValueError as e:
            raise ParseFailure(f"CSV row {line_no} is invalid: {e}") from e
    return todos
