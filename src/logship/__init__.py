from __future__ import annotations

from .core.config import ClientConfig, ProcessorConfig
from .core.errors import ArgumentError, LogshipError, LogSourceError, SkipRangeError
from .core.models import LogRecord, RunResult, RunStatus
from .core.use_cases.process_logs import LogsProcessor
from .storage.checkpoint import CheckpointStore

__all__ = [
    "LogsProcessor",
    "CheckpointStore",
    "ProcessorConfig",
    "ClientConfig",
    "LogRecord",
    "RunStatus",
    "RunResult",
    "ArgumentError",
    "LogshipError",
    "LogSourceError",
    "SkipRangeError",
]
