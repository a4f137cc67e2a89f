# tests/test_local_files.py

from __future__ import annotations

import os
from datetime import UTC, datetime
from pathlib import Path

import pytest

from simpletodo.connectors.local_files import ConsoleShareSink, StaticDocumentPicker
from simpletodo.core.timeutil import parse_iso, to_iso
from simpletodo.storage.directory_store import LocalDirectoryStore


def test_iso_timestamps_use_milliseconds_and_z() -> None:
    assert to_iso(datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=UTC)) == "2024-01-02T03:04:05.678Z"
    precise = datetime(2024, 1, 2, 3, 4, 5, 678901, tzinfo=UTC)
    assert to_iso(precise) == "2024-01-02T03:04:05.678901Z"
    assert parse_iso(to_iso(precise)) == precise
    assert parse_iso("2024-01-02T03:04:05.678Z") == datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=UTC)


@pytest.mark.asyncio
async def test_directory_store_file_ops(tmp_path: Path) -> None:
    store = LocalDirectoryStore(tmp_path / "docs", tmp_path / "cache")
    root = os.path.join(store.document_directory, "a", "b")

    await store.mkdir(root)
    assert await store.exists(root)

    path = os.path.join(root, "x.json")
    await store.write_file(path, "héllo")
    assert await store.read_file(path) == "héllo"
    assert await store.list_dir(root) == ["x.json"]

    copy = os.path.join(root, "y.json")
    await store.copy_file(path, copy)
    assert await store.list_dir(root) == ["x.json", "y.json"]

    await store.delete_file(path)
    assert not await store.exists(path)
    with pytest.raises(FileNotFoundError):
        await store.delete_file(path)


@pytest.mark.asyncio
async def test_console_share_sink_prints_location(tmp_path: Path) -> None:
    lines: list[str] = []
    sink = ConsoleShareSink(emit=lines.append)

    assert await sink.is_available() is True
    await sink.share("out.csv", mime_type="text/csv", dialog_title="Export")

    assert lines == [f"Export: {os.path.abspath('out.csv')} (text/csv)"]


@pytest.mark.asyncio
async def test_static_picker(tmp_path: Path) -> None:
    assert await StaticDocumentPicker().pick_document(mime_type="text/csv") is None

    f = tmp_path / "in.csv"
    f.write_text("x", encoding="utf-8")
    assert await StaticDocumentPicker(str(f)).pick_document(mime_type="text/csv") == str(f)

    with pytest.raises(FileNotFoundError):
        await StaticDocumentPicker(str(tmp_path / "missing.csv")).pick_document(mime_type="text/csv")
