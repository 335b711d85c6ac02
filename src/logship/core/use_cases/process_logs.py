from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import NoReturn

from logship.core.clock import DEFAULT_CLOCK, Clock
from logship.core.config import MAX_PAGE_SIZE, ProcessorConfig
from logship.core.errors import SkipRangeError
from logship.core.interfaces import ILogsHandler, ILogStream, ILogStreamFactory
from logship.core.log_types import get_log_filter
from logship.core.models import Checkpoint, LogRecord, RunResult, RunStatus
from logship.storage.checkpoint import CheckpointStore

logger = logging.getLogger(__name__)

STALE_AFTER_MS = 604_800_000  # one week


# ---------------------------------------------------------------------------
# Run state
# ---------------------------------------------------------------------------


class Phase(enum.Enum):
    FETCHING = "fetching"
    BATCHING = "batching"
    DELIVERING = "delivering"
    RETRYING = "retrying"
    ADVANCING = "advancing"
    CONCLUDING = "concluding"


@dataclass(slots=True)
class RunState:
    """
    Mutable state of a single run.

    Created at the start of `LogsProcessor.run()` and discarded when it
    returns. The retry counter is shared by every batch of the run: once
    any batch exhausts it, the run terminates.
    """

    start_ms: float
    batch_size: int
    max_retries: int
    retries: int = 0
    batch: list[LogRecord] = field(default_factory=list)
    last_log_date: float = 0
    phase: Phase = Phase.FETCHING

    def next_limit(self) -> int:
        """Page size for the next request: what still fits, capped at one page."""
        return min(MAX_PAGE_SIZE, self.batch_size - len(self.batch))

    def add_page(self, logs: list[LogRecord]) -> None:
        self.batch.extend(logs)
        if logs:
            self.last_log_date = logs[-1].timestamp_ms()

    def batch_full(self) -> bool:
        return len(self.batch) >= self.batch_size


class _RunAborted(Exception):
    """Internal signal: conclude the run as failed at `checkpoint`."""

    def __init__(self, error: BaseException, checkpoint: Checkpoint) -> None:
        super().__init__(str(error))
        self.error = error
        self.checkpoint = checkpoint


def _describe_error(error: BaseException) -> object:
    if isinstance(error, SkipRangeError):
        return error.to_dict()
    return str(error)


def _format_ms(ms: float) -> str:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Domain service – LogsProcessor
# ---------------------------------------------------------------------------


class LogsProcessor:
    """
    Ships logs from a checkpointed stream to a handler in batches.

    A run:
    - resumes from the persisted checkpoint (or `config.start_from`),
    - accumulates pages until `batch_size` records are buffered,
    - hands each batch to the handler, redelivering on failure while the
      run's retry budget and time budget allow,
    - persists its status and checkpoint through `CheckpointStore`.

    Delivery is at-least-once. Only one page request or handler call is in
    flight at any time, and the time budget is only checked between
    deliveries, never while the handler runs.
    """

    def __init__(
        self,
        config: ProcessorConfig,
        *,
        checkpoint_store: CheckpointStore,
        stream_factory: ILogStreamFactory,
        clock: Clock = DEFAULT_CLOCK,
    ) -> None:
        self.config = config
        self.checkpoint_store = checkpoint_store
        self._stream_factory = stream_factory
        self._clock = clock

    def has_time_left(self, start_ms: float) -> bool:
        return start_ms + self.config.max_run_time_seconds * 1000 >= self._clock.now_ms()

    def get_log_filter(self) -> list[str]:
        return get_log_filter(self.config.log_types, self.config.log_level)

    async def create_stream(self) -> ILogStream:
        checkpoint = await self.checkpoint_store.get_checkpoint(self.config.start_from)
        types = self.get_log_filter()
        logger.info("Opening log stream at checkpoint %s (types=%s)", checkpoint, types or "all")
        return self._stream_factory.open(checkpoint_id=checkpoint, types=types)

    async def run(self, handler: ILogsHandler) -> RunResult:
        """
        Execute one run.

        Returns
        -------
        RunResult
            Final status and the checkpoint reached.

        Raises
        ------
        LogSourceError
            The source failed; progress is kept at the previous checkpoint.
        SkipRangeError
            The handler kept failing after `max_retries` redeliveries.
        Exception
            The handler's own error if the time budget ran out mid-retry, or
            the document store's error if persisting the outcome failed.
        """
        stream = await self.create_stream()
        state = RunState(
            start_ms=self._clock.now_ms(),
            batch_size=self.config.batch_size,
            max_retries=self.config.max_retries,
        )

        aborted: _RunAborted | None = None
        try:
            await self._pump(handler, stream, state)
        except _RunAborted as exc:
            aborted = exc

        if aborted is not None:
            logger.error("Run aborted while %s: %s", state.phase.value, aborted.error)
            await self._run_failed(aborted.error, stream.status, aborted.checkpoint)

        return await self._run_success(stream.status, stream.last_checkpoint, state)

    # ---------- state machine ----------

    async def _pump(self, handler: ILogsHandler, stream: ILogStream, state: RunState) -> None:
        """Fetch → batch → deliver until the stream ends."""
        while True:
            state.phase = Phase.FETCHING
            try:
                logs = await stream.next(state.next_limit())
            except Exception as err:
                raise _RunAborted(err, stream.previous_checkpoint) from err

            if logs is None:
                state.phase = Phase.CONCLUDING
                await self._deliver(handler, stream, state)
                stream.batch_saved()
                return

            state.phase = Phase.BATCHING
            state.add_page(logs)
            if not state.batch_full():
                continue

            await self._deliver(handler, stream, state)
            state.batch = []

            if not self.has_time_left(state.start_ms):
                logger.info("Run time budget of %ss used up; ending stream", self.config.max_run_time_seconds)
                stream.done()
                continue

            state.phase = Phase.ADVANCING
            stream.batch_saved()

    async def _deliver(self, handler: ILogsHandler, stream: ILogStream, state: RunState) -> None:
        """Hand the current batch to the handler, applying the retry policy."""
        while True:
            if state.phase is not Phase.RETRYING:
                state.phase = Phase.DELIVERING
            try:
                await handler.on_logs_received(state.batch)
                return
            except Exception as err:
                if not self.has_time_left(state.start_ms):
                    raise _RunAborted(err, stream.previous_checkpoint) from err

                if state.retries < state.max_retries:
                    state.retries += 1
                    state.phase = Phase.RETRYING
                    logger.warning(
                        "Handler failed on %d logs (%s); retry %d/%d",
                        len(state.batch),
                        err,
                        state.retries,
                        state.max_retries,
                    )
                    continue

                skip = SkipRangeError(
                    from_checkpoint=stream.previous_checkpoint,
                    to_checkpoint=stream.last_checkpoint,
                    retries=state.max_retries,
                    cause=err,
                )
                raise _RunAborted(skip, stream.last_checkpoint) from err

    # ---------- conclusion ----------

    async def _run_success(self, status: RunStatus, checkpoint: Checkpoint, state: RunState) -> RunResult:
        if status.end is None:
            status.end = self._clock.now_ms()

        if status.logs_processed > 0:
            if self._clock.now_ms() - state.last_log_date >= STALE_AFTER_MS:
                status.warning = (
                    "Logs are outdated more than for week. "
                    f"Last processed log has date is {_format_ms(state.last_log_date)}"
                )
                logger.warning(status.warning)

            await self.checkpoint_store.done(status, checkpoint)

        logger.info("Run finished: %d logs processed, checkpoint %s", status.logs_processed, checkpoint)
        return RunResult(status=status, checkpoint=checkpoint)

    async def _run_failed(self, error: BaseException, status: RunStatus, checkpoint: Checkpoint) -> NoReturn:
        status.error = _describe_error(error)
        if status.end is None:
            status.end = self._clock.now_ms()

        try:
            await self.checkpoint_store.done(status, checkpoint)
        except Exception as persist_err:
            logger.error("Could not persist failed run at checkpoint %s: %s", checkpoint, persist_err)
            raise persist_err from error

        raise error
