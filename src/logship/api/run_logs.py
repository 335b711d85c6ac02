from __future__ import annotations

from pathlib import Path

from logship.clients.logs_stream import LogsApiStreamFactory
from logship.clients.management_api import ManagementApiClient
from logship.core.clock import DEFAULT_CLOCK, Clock
from logship.core.config import ClientConfig, ProcessorConfig
from logship.core.interfaces import ILogsHandler
from logship.core.models import RunResult
from logship.core.use_cases.process_logs import LogsProcessor
from logship.storage.checkpoint import CheckpointStore
from logship.storage.documents import JsonFileDocumentStore

# ---------------------------------------------------------------------------
# Setup helpers (filesystem / network wiring, application layer)
# ---------------------------------------------------------------------------


def _setup(
    config: ProcessorConfig,
    checkpoint_path: Path,
    *,
    timeout_s: int,
    clock: Clock,
) -> tuple[ManagementApiClient, LogsProcessor]:
    """Wire client, stream factory, checkpoint store and processor."""
    client = ManagementApiClient(ClientConfig.from_processor_config(config, timeout_s=timeout_s))
    checkpoint_store = CheckpointStore(
        JsonFileDocumentStore(checkpoint_path),
        limit_kib=config.storage_limit_kib,
    )
    processor = LogsProcessor(
        config,
        checkpoint_store=checkpoint_store,
        stream_factory=LogsApiStreamFactory(client, clock=clock),
        clock=clock,
    )
    return client, processor


async def run_logs(
    *,
    config: ProcessorConfig,
    handler: ILogsHandler,
    checkpoint_path: Path,
    timeout_s: int = 20,
    clock: Clock = DEFAULT_CLOCK,
) -> RunResult:
    """
    High-level convenience API for scripts and the CLI.

    Runs the processor once against the Management API, keeping the
    checkpoint document at `checkpoint_path`, and always closes the client.
    """
    client, processor = _setup(config, checkpoint_path, timeout_s=timeout_s, clock=clock)
    try:
        return await processor.run(handler)
    finally:
        await client.aclose()
