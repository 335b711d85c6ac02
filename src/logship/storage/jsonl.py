from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path

from logship.core.interfaces import ILogsHandler
from logship.core.models import LogRecord


class JsonlFileHandler(ILogsHandler):
    """Batch handler appending each log as one JSON line.

    A batch is flushed and fsynced before the handler returns.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = asyncio.Lock()

    async def on_logs_received(self, batch: list[LogRecord]) -> None:
        if not batch:
            return
        lines = "".join(
            json.dumps(record.to_json_dict(), separators=(",", ":"), ensure_ascii=False) + "\n"
            for record in batch
        )
        async with self._lock:
            await asyncio.to_thread(self._write_lines, self.path, lines)

    @staticmethod
    def _write_lines(path: Path, lines: str) -> None:
        """Append lines with immediate flush and sync."""
        with open(path, "a", encoding="utf-8", buffering=1) as f:
            f.write(lines)
            f.flush()
            os.fsync(f.fileno())
