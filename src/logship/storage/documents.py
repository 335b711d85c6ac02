from __future__ import annotations

import asyncio
import copy
import json
import os
from pathlib import Path
from typing import Any

from logship.core.interfaces import IDocumentStore


class JsonFileDocumentStore(IDocumentStore):
    """Single JSON document kept in a local file.

    Writes go to a temporary file that then replaces the target, so a crash
    mid-write leaves the previous document intact.
    """

    def __init__(self, path: str | Path) -> None:
        """Initialize the store at the given path.

        Args:
            path: File path of the JSON document (created on first write)
        """
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = asyncio.Lock()

    async def read(self) -> dict[str, Any] | None:
        async with self._lock:
            return await asyncio.to_thread(self._read, self.path)

    async def write(self, document: dict[str, Any]) -> None:
        payload = json.dumps(document, separators=(",", ":"), ensure_ascii=False)
        async with self._lock:
            await asyncio.to_thread(self._atomic_write, self.path, payload)

    @staticmethod
    def _read(path: Path) -> dict[str, Any] | None:
        if not path.is_file():
            return None
        raw = path.read_text(encoding="utf-8")
        if not raw.strip():
            return None
        return json.loads(raw)

    @staticmethod
    def _atomic_write(path: Path, payload: str) -> None:
        """Write to tmp, fsync, then replace."""
        tmp = path.with_suffix(path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)


class MemoryDocumentStore(IDocumentStore):
    """In-process document store for tests and dry runs."""

    def __init__(self, document: dict[str, Any] | None = None) -> None:
        self.document = document
        self.writes = 0

    async def read(self) -> dict[str, Any] | None:
        return copy.deepcopy(self.document)

    async def write(self, document: dict[str, Any]) -> None:
        self.document = copy.deepcopy(document)
        self.writes += 1
