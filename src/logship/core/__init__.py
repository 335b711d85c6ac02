"""Core data models, configuration, interfaces and errors.

This package provides:
- Data models (LogRecord, RunStatus, RunResult)
- Configuration classes (ProcessorConfig, ClientConfig)
- The log type table and filter expansion
- Error hierarchy (LogshipError and subclasses)
"""

from logship.core.config import ClientConfig, ProcessorConfig
from logship.core.errors import ArgumentError, LogshipError, LogSourceError, SkipRangeError
from logship.core.log_types import LOG_TYPES, LogType, get_log_filter
from logship.core.models import LogRecord, RunResult, RunStatus

__all__ = [
    "ClientConfig",
    "ProcessorConfig",
    "ArgumentError",
    "LogshipError",
    "LogSourceError",
    "SkipRangeError",
    "LOG_TYPES",
    "LogType",
    "get_log_filter",
    "LogRecord",
    "RunResult",
    "RunStatus",
]
