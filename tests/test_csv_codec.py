# tests/test_csv_codec.py

from __future__ import annotations

import pytest

from simpletodo.core.errors import ParseFailure
from simpletodo.core.timeutil import parse_iso
from simpletodo.exchange.csv_codec import BOM, CSV_HEADER, decode_todos_csv, encode_todos_csv

from .conftest import make_todo


def test_encode_writes_bom_header_and_labels() -> None:
    todo = make_todo(
        "t1",
        "Report",
        description="Quarterly",
        completed=True,
        priority=1,
        categoryId="work",
        tagIds=["a", "b"],
        dueDate="2024-03-05T10:00:00.000Z",
    )
    text = encode_todos_csv([todo])

    assert text.startswith(BOM)
    lines = text[len(BOM):].splitlines()
    assert lines[0] == ",".join(CSV_HEADER)
    cells = lines[1].split(",")
    assert cells[0] == "t1"
    assert cells[3] == "是"
    assert cells[5] == "高"
    assert cells[6] == "work"
    assert cells[7] == "a;b"


def test_encode_without_bom_and_empty_optionals() -> None:
    text = encode_todos_csv([make_todo()], with_bom=False)
    assert not text.startswith(BOM)
    row = text.splitlines()[1].split(",")
    assert row[2] == ""  # description
    assert row[3] == "否"
    assert row[4] == ""  # due date
    assert row[5] == ""  # priority


def test_decode_round_trips_what_csv_carries() -> None:
    todo = make_todo(
        "t1",
        'Call "Bob", then email',
        description="line one\nline two",
        priority=3,
        tagIds=["x"],
        dueDate="2024-03-05T10:00:00.000Z",
        subTasks=[{"id": "s1", "title": "dropped", "completed": False}],
    )
    decoded = decode_todos_csv(encode_todos_csv([todo]))

    assert len(decoded) == 1
    out = decoded[0]
    assert out["title"] == 'Call "Bob", then email'
    assert out["description"] == "line one\nline two"
    assert out["priority"] == 3
    assert out["tagIds"] == ["x"]
    assert out["subTasks"] == []
    assert "categoryId" not in out
    assert parse_iso(out["dueDate"]) == parse_iso("2024-03-05T10:00:00.000Z")
    assert parse_iso(out["createdAt"]) == parse_iso(todo["createdAt"])


def test_decode_skips_blank_lines_and_accepts_always_quoted_titles() -> None:
    text = (
        ",".join(CSV_HEADER)
        + "\n\n"
        + 't9,"Plain title",,否,,中,,,2024-01-01 10:00:00,2024-01-02 10:00:00\n'
        + "\n"
    )
    decoded = decode_todos_csv(text)
    assert [t["id"] for t in decoded] == ["t9"]
    assert decoded[0]["title"] == "Plain title"
    assert decoded[0]["priority"] == 2


def test_decode_header_only_gives_empty_list() -> None:
    assert decode_todos_csv(BOM + ",".join(CSV_HEADER) + "\n") == []


@pytest.mark.parametrize(
    "row",
    [
        "t1,title,,否",  # short row
        "t1,title,,否,,急,,,2024-01-01 10:00:00,2024-01-02 10:00:00",  # unknown priority label
        "t1,title,,否,tomorrow,,,,2024-01-01 10:00:00,2024-01-02 10:00:00",  # bad date
    ],
)
def test_decode_rejects_bad_rows(row: str) -> None:
    with pytest.raises(ParseFailure):
        decode_todos_csv(",".join(CSV_HEADER) + "\n" + row + "\n")


def test_decode_empty_text_fails() -> None:
    with pytest.raises(ParseFailure):
        decode_todos_csv("")


def test_encode_rejects_task_without_timestamps() -> None:
    with pytest.raises(ParseFailure):
        encode_todos_csv([{"id": "t1", "title": "no dates"}])
