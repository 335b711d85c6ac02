"""Checkpointed stream over the management API logs endpoint."""

from __future__ import annotations

import logging

from logship.clients.management_api import ManagementApiClient
from logship.core.clock import DEFAULT_CLOCK, Clock
from logship.core.interfaces import ILogStream, ILogStreamFactory
from logship.core.models import Checkpoint, LogRecord, RunStatus

logger = logging.getLogger(__name__)


class LogsApiStream(ILogStream):
    """
    Pages through logs starting after `checkpoint_id`.

    - `last_checkpoint` follows the id of the last raw log fetched, even when
      type filtering drops it, so filtered logs are never fetched twice.
    - `previous_checkpoint` only moves on `batch_saved()`.
    - An empty raw page ends the stream.
    """

    def __init__(
        self,
        client: ManagementApiClient,
        *,
        checkpoint_id: Checkpoint,
        types: list[str] | None = None,
        clock: Clock = DEFAULT_CLOCK,
    ) -> None:
        self.client = client
        self._clock = clock
        self.types = set(types or [])
        self.previous_checkpoint: Checkpoint = checkpoint_id
        self.last_checkpoint: Checkpoint = checkpoint_id
        self.status = RunStatus(start=clock.now_ms(), checkpoint=checkpoint_id)
        self._ended = False

    async def next(self, limit: int) -> list[LogRecord] | None:
        if self._ended:
            return None

        logs = await self.client.get_logs(checkpoint=self.last_checkpoint, take=limit)
        if not logs:
            self._finish()
            return None

        if logs[-1].log_id:
            self.last_checkpoint = logs[-1].log_id

        if self.types:
            logs = [log for log in logs if log.type in self.types]

        self.status.logs_processed += len(logs)
        return logs

    def done(self) -> None:
        self._finish()

    def batch_saved(self) -> None:
        self.previous_checkpoint = self.last_checkpoint

    def _finish(self) -> None:
        if not self._ended:
            self._ended = True
            self.status.end = self._clock.now_ms()
            logger.debug("Log stream ended at checkpoint %s", self.last_checkpoint)


class LogsApiStreamFactory(ILogStreamFactory):
    def __init__(self, client: ManagementApiClient, *, clock: Clock = DEFAULT_CLOCK) -> None:
        self.client = client
        self.clock = clock

    def open(self, *, checkpoint_id: Checkpoint, types: list[str]) -> LogsApiStream:
        return LogsApiStream(self.client, checkpoint_id=checkpoint_id, types=types, clock=self.clock)
