# src/simpletodo/storage/directory_store.py

from __future__ import annotations

import asyncio
import logging
import os
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


class LocalDirectoryStore:
    """
    DirectoryStore backed by the local filesystem.

    Paths are strings (absolute or relative to the process cwd); the two
    well-known roots are exposed as document_directory / cache_directory.
    All errors are plain OSError subclasses.
    """

    def __init__(self, documents_dir: str | Path, cache_dir: str | Path) -> None:
        self.document_directory = str(Path(documents_dir))
        self.cache_directory = str(Path(cache_dir))

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(os.path.exists, path)

    async def mkdir(self, path: str, *, intermediates: bool = True) -> None:
        def _mkdir() -> None:
            Path(path).mkdir(parents=intermediates, exist_ok=True)

        await asyncio.to_thread(_mkdir)

    async def read_file(self, path: str) -> str:
        return await asyncio.to_thread(Path(path).read_text, encoding="utf-8")

    async def write_file(self, path: str, content: str) -> None:
        def _write() -> None:
            target = Path(path)
            tmp = target.with_name(f"{target.name}.tmp")
            tmp.write_text(content, encoding="utf-8", newline="")
            os.replace(tmp, target)

        await asyncio.to_thread(_write)
        logger.debug("Wrote %s (%d chars)", path, len(content))

    async def delete_file(self, path: str) -> None:
        await asyncio.to_thread(os.remove, path)

    async def list_dir(self, path: str) -> list[str]:
        return sorted(await asyncio.to_thread(os.listdir, path))

    async def copy_file(self, src: str, dst: str) -> None:
        await asyncio.to_thread(shutil.copyfile, src, dst)
