from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from logship.core.models import Checkpoint, LogRecord, RunStatus


# ---------------------------------------------------------------------------
# ILogStream
# ---------------------------------------------------------------------------

@runtime_checkable
class ILogStream(Protocol):
    """
    Paginated, checkpointed stream of log records.

    Domain expectations:
    - Pages come back in source order.
    - `last_checkpoint` is the position after the most recent page.
    - `previous_checkpoint` is the last position acknowledged via
      `batch_saved()`, i.e. the last known-good resume point.
    """

    status: RunStatus
    previous_checkpoint: Checkpoint
    last_checkpoint: Checkpoint

    async def next(self, limit: int) -> list[LogRecord] | None:
        """
        Fetch up to `limit` records.

        Returns
        -------
        list[LogRecord] | None
            The next page (possibly empty after filtering), or None once the
            stream has ended.

        Raises
        ------
        LogSourceError
            When the source fails mid-stream.
        """
        ...

    def done(self) -> None:
        """Terminate early; the next call to `next` reports end of stream."""
        ...

    def batch_saved(self) -> None:
        """Acknowledge that `last_checkpoint` is durable and safe to resume from."""
        ...


# ---------------------------------------------------------------------------
# ILogStreamFactory
# ---------------------------------------------------------------------------

@runtime_checkable
class ILogStreamFactory(Protocol):
    """Opens a stream positioned at a checkpoint, filtered to a set of log types."""

    def open(self, *, checkpoint_id: Checkpoint, types: list[str]) -> ILogStream:
        ...


# ---------------------------------------------------------------------------
# ILogsHandler
# ---------------------------------------------------------------------------

@runtime_checkable
class ILogsHandler(Protocol):
    """
    Caller-supplied consumer of batches.

    Returning normally accepts the batch; raising rejects it and the
    processor may redeliver the same batch. Side effects performed before
    raising are not undone, so handlers must tolerate redelivery.
    """

    async def on_logs_received(self, batch: list[LogRecord]) -> None:
        ...


# ---------------------------------------------------------------------------
# IDocumentStore
# ---------------------------------------------------------------------------

@runtime_checkable
class IDocumentStore(Protocol):
    """
    Read/write of a single JSON-like document.

    Implementations:
    - JsonFileDocumentStore (local JSON file)
    - MemoryDocumentStore (tests, dry runs)
    """

    async def read(self) -> dict[str, Any] | None:
        """Return the stored document, or None if nothing was written yet."""
        ...

    async def write(self, document: dict[str, Any]) -> None:
        ...
