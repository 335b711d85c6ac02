"""Checkpoint persistence with a bounded tail of run history.

The whole state lives in one document::

    {"checkpointId": "<log id>", "logs": [<RunStatus>, ...]}

`logs` is a coarse, size-triggered ring buffer: when the serialized document
reaches the byte limit, the five oldest entries are dropped before the new
status is appended.

Single writer: `done()` is a plain read-modify-write. Two runs sharing one
document can overwrite each other's update; callers must ensure at most one
run per document at a time.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from logship.core.errors import ArgumentError
from logship.core.interfaces import IDocumentStore
from logship.core.models import Checkpoint, RunStatus

logger = logging.getLogger(__name__)

DEFAULT_LIMIT_KIB = 400
EVICT_COUNT = 5


def document_size(document: Any) -> int:
    """UTF-8 byte size of the compact JSON serialization of `document`."""
    return len(json.dumps(document, separators=(",", ":"), ensure_ascii=False).encode("utf-8"))


class CheckpointStore:
    """Reads the resume checkpoint and records run outcomes.

    Parameters
    ----------
    storage : IDocumentStore
        Backing read/write document store.
    limit_kib : int
        Size bound for the document, in KiB.
    """

    def __init__(self, storage: IDocumentStore | None, limit_kib: int = DEFAULT_LIMIT_KIB) -> None:
        if storage is None:
            raise ArgumentError("storage is required")
        self.storage = storage
        self.limit_kib = limit_kib

    async def get_checkpoint(self, fallback: Checkpoint = None) -> Checkpoint:
        """Persisted checkpoint, else `fallback`, else None."""
        data = await self.storage.read()
        if data is None:
            return fallback or None
        return data.get("checkpointId") or fallback or None

    async def done(self, status: RunStatus, checkpoint: Checkpoint) -> None:
        """Append `status` to the run history and move the checkpoint."""
        data = await self.storage.read()
        if data is None:
            data = {}

        size = document_size(data)
        logs: list[dict[str, Any]] = data.get("logs") or []
        data["logs"] = logs

        if size >= self.limit_kib * 1024 and logs:
            logger.info("Checkpoint document is %d bytes; evicting %d oldest run(s)", size, EVICT_COUNT)
            del logs[:EVICT_COUNT]

        status.checkpoint = checkpoint
        logs.append(status.to_dict())
        data["checkpointId"] = checkpoint

        await self.storage.write(data)

    async def history(self) -> list[RunStatus]:
        """Retained run statuses, oldest first."""
        data = await self.storage.read() or {}
        return [RunStatus.from_dict(entry) for entry in data.get("logs") or []]
