"""Storage components for checkpoints and log sinks.

This package provides:
- CheckpointStore: resume checkpoint plus bounded run history
- JsonFileDocumentStore / MemoryDocumentStore: backing document stores
- ParquetShardHandler: Parquet shard sink with resumable shard index
- JsonlFileHandler: append-only JSON lines sink
"""

from logship.storage.checkpoint import CheckpointStore
from logship.storage.documents import JsonFileDocumentStore, MemoryDocumentStore
from logship.storage.jsonl import JsonlFileHandler
from logship.storage.shards import ParquetShardHandler, ShardsDir

__all__ = [
    "CheckpointStore",
    "JsonFileDocumentStore",
    "MemoryDocumentStore",
    "JsonlFileHandler",
    "ParquetShardHandler",
    "ShardsDir",
]
