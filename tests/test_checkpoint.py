import pytest

from logship.core.errors import ArgumentError
from logship.core.models import RunStatus
from logship.storage.checkpoint import CheckpointStore, document_size
from logship.storage.documents import MemoryDocumentStore


def _history(n: int, pad: int = 200) -> list[dict]:
    return [RunStatus(start=i, logs_processed=i, checkpoint=str(i), warning="x" * pad).to_dict() for i in range(n)]


def test_storage_is_required() -> None:
    with pytest.raises(ArgumentError):
        CheckpointStore(None)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("document", "fallback", "expected"),
    [
        ({"checkpointId": "c1", "logs": []}, "s0", "c1"),
        ({"checkpointId": "c1"}, None, "c1"),
        ({"logs": []}, "s0", "s0"),
        ({"checkpointId": None}, "s0", "s0"),
        (None, "s0", "s0"),
        (None, None, None),
        ({}, None, None),
    ],
)
async def test_get_checkpoint_priority(document: dict | None, fallback: str | None, expected: str | None) -> None:
    store = CheckpointStore(MemoryDocumentStore(document))

    assert await store.get_checkpoint(fallback) == expected


@pytest.mark.asyncio
async def test_done_creates_document(memory_store: MemoryDocumentStore, checkpoint_store: CheckpointStore) -> None:
    status = RunStatus(start=1, logs_processed=3)

    await checkpoint_store.done(status, "c3")

    assert status.checkpoint == "c3"
    assert memory_store.document == {
        "checkpointId": "c3",
        "logs": [{"start": 1, "end": None, "logsProcessed": 3, "checkpoint": "c3"}],
    }


@pytest.mark.asyncio
async def test_done_appends_under_limit() -> None:
    memory_store = MemoryDocumentStore({"checkpointId": "9", "logs": _history(10)})
    store = CheckpointStore(memory_store)

    await store.done(RunStatus(start=10, logs_processed=1), "10")

    logs = memory_store.document["logs"]
    assert len(logs) == 11
    assert logs[0]["checkpoint"] == "0"
    assert memory_store.document["checkpointId"] == "10"


@pytest.mark.asyncio
async def test_done_evicts_five_oldest_at_limit() -> None:
    document = {"checkpointId": "9", "logs": _history(10)}
    assert document_size(document) >= 1024
    memory_store = MemoryDocumentStore(document)
    store = CheckpointStore(memory_store, limit_kib=1)

    await store.done(RunStatus(start=10, logs_processed=1), "10")

    logs = memory_store.document["logs"]
    assert [entry["checkpoint"] for entry in logs] == ["5", "6", "7", "8", "9", "10"]


@pytest.mark.asyncio
@pytest.mark.parametrize(("target", "kept"), [(1023, 6), (1024, 1), (1025, 1)])
async def test_done_evicts_from_exactly_the_limit(target: int, kept: int) -> None:
    document = {"checkpointId": "5", "logs": _history(6, pad=0), "note": ""}
    document["note"] = "x" * (target - document_size(document))
    assert document_size(document) == target
    memory_store = MemoryDocumentStore(document)
    store = CheckpointStore(memory_store, limit_kib=1)

    await store.done(RunStatus(start=6, logs_processed=1), "6")

    logs = memory_store.document["logs"]
    assert len(logs) == kept + 1
    assert logs[-1]["checkpoint"] == "6"


@pytest.mark.asyncio
async def test_done_evicts_fewer_than_five_when_history_is_short() -> None:
    memory_store = MemoryDocumentStore({"checkpointId": "2", "logs": _history(3)})
    store = CheckpointStore(memory_store, limit_kib=0)

    await store.done(RunStatus(start=3), "3")

    assert [entry["checkpoint"] for entry in memory_store.document["logs"]] == ["3"]


@pytest.mark.asyncio
async def test_done_keeps_other_document_fields() -> None:
    memory_store = MemoryDocumentStore({"checkpointId": "1", "owner": "exporter"})
    store = CheckpointStore(memory_store, limit_kib=0)

    await store.done(RunStatus(start=0, error="boom"), "1")

    assert memory_store.document["owner"] == "exporter"
    assert memory_store.document["logs"][0]["error"] == "boom"


def test_document_size_counts_utf8_bytes() -> None:
    assert document_size({"a": "é"}) == len('{"a":"é"}'.encode("utf-8"))


@pytest.mark.asyncio
async def test_history_round_trips_statuses() -> None:
    memory_store = MemoryDocumentStore({"checkpointId": "1", "logs": _history(2, pad=0)})
    store = CheckpointStore(memory_store)

    history = await store.history()

    assert [st.checkpoint for st in history] == ["0", "1"]
    assert history[1].logs_processed == 1
