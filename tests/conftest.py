from datetime import datetime, timedelta, timezone
from typing import Any, Callable
from unittest.mock import AsyncMock

import pytest

from logship.core.clock import MockClock
from logship.core.models import LogRecord, RunStatus
from logship.storage.checkpoint import CheckpointStore
from logship.storage.documents import MemoryDocumentStore

NOW = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeLogStream:
    """Scripted stream: each item is a page (list of logs) or an exception to raise."""

    def __init__(self, pages: list[Any], checkpoint_id: str | None) -> None:
        self.pages = list(pages)
        self.previous_checkpoint = checkpoint_id
        self.last_checkpoint = checkpoint_id
        self.status = RunStatus(start=NOW.timestamp() * 1000, checkpoint=checkpoint_id)
        self.limits: list[int] = []
        self.ended = False
        self.done_called = False

    async def next(self, limit: int) -> list[LogRecord] | None:
        self.limits.append(limit)
        if self.ended or not self.pages:
            self.ended = True
            return None
        page = self.pages.pop(0)
        if isinstance(page, Exception):
            raise page
        if page:
            self.last_checkpoint = page[-1].log_id
        self.status.logs_processed += len(page)
        return page

    def done(self) -> None:
        self.done_called = True
        self.ended = True

    def batch_saved(self) -> None:
        self.previous_checkpoint = self.last_checkpoint


class FakeStreamFactory:
    def __init__(self, pages: list[Any]) -> None:
        self.pages = pages
        self.opened: list[dict[str, Any]] = []
        self.stream: FakeLogStream | None = None

    def open(self, *, checkpoint_id: str | None, types: list[str]) -> FakeLogStream:
        self.opened.append({"checkpoint_id": checkpoint_id, "types": types})
        self.stream = FakeLogStream(self.pages, checkpoint_id)
        return self.stream


class RecordingHandler:
    """Handler that records each delivered batch and fails according to `fail`."""

    def __init__(self, fail: Callable[[int, list[LogRecord]], BaseException | None] | None = None) -> None:
        self.calls: list[list[LogRecord]] = []
        self._fail = fail

    async def on_logs_received(self, batch: list[LogRecord]) -> None:
        self.calls.append(list(batch))
        if self._fail is not None:
            err = self._fail(len(self.calls), batch)
            if err is not None:
                raise err


@pytest.fixture
def make_log() -> Callable[..., LogRecord]:
    def _make(log_id: str, *, age: timedelta = timedelta(minutes=5), type: str = "s", **extra: Any) -> LogRecord:
        return LogRecord.model_validate({"_id": log_id, "date": NOW - age, "type": type, **extra})

    return _make


@pytest.fixture
def clock() -> MockClock:
    return MockClock(start_ms=NOW.timestamp() * 1000)


@pytest.fixture
def memory_store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture
def checkpoint_store(memory_store: MemoryDocumentStore) -> CheckpointStore:
    return CheckpointStore(memory_store)


@pytest.fixture
def stream_factory() -> Callable[[list[Any]], FakeStreamFactory]:
    return FakeStreamFactory


@pytest.fixture
def handler_factory() -> Callable[..., RecordingHandler]:
    return RecordingHandler


@pytest.fixture
def mock_api_client() -> AsyncMock:
    client = AsyncMock()
    client.get_logs = AsyncMock(return_value=[])
    client.aclose = AsyncMock()
    return client
