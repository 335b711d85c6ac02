from __future__ import annotations

import asyncio
import glob
import json
import logging
import os
from pathlib import Path
from typing import Any

import pyarrow as pa
import pyarrow.parquet as pq

from logship.core.errors import ArgumentError
from logship.core.interfaces import ILogsHandler
from logship.core.models import LogRecord

logger = logging.getLogger(__name__)

# === Base schema (Arrow) ===

_BASE_FIELDS: list[tuple[str, pa.DataType]] = [
    ("log_id", pa.string()),
    ("date", pa.timestamp("ms", tz="UTC")),
    ("type", pa.string()),
]


def _to_cell(value: Any) -> str | None:
    """Extra fields are stored as strings; nested values as compact JSON."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"), default=str)


def records_to_table(batch: list[LogRecord]) -> pa.Table:
    """Convert a batch to an Arrow table, one string column per extra field.

    Row order is the batch order.
    """
    arrays: dict[str, list[Any]] = {
        "log_id": [r.log_id for r in batch],
        "date": [r.date for r in batch],
        "type": [r.type for r in batch],
    }
    fields = [pa.field(n, t) for n, t in _BASE_FIELDS]

    dyn_keys = sorted({k for r in batch for k in (r.model_extra or {})})
    for key in dyn_keys:
        arrays[key] = [_to_cell((r.model_extra or {}).get(key)) for r in batch]
        fields.append(pa.field(key, pa.string()))

    return pa.Table.from_pydict(arrays, schema=pa.schema(fields))


class ShardsDir:
    def __init__(self, shards_dir: Path) -> None:
        self.shards_dir = shards_dir
        self.shards_dir.mkdir(exist_ok=True, parents=True)

    def shards_files_pattern(self) -> str:
        return (self.shards_dir / "shard_*.parquet").as_posix()

    def list_shards(self) -> list[str]:
        return sorted(glob.glob(self.shards_files_pattern()))

    def shard_path(self, idx: int) -> Path:
        return self.shards_dir / f"shard_{idx:05d}.parquet"


class ParquetShardHandler(ILogsHandler):
    """
    Batch handler writing accepted logs into numbered Parquet shards.

    Every batch is on disk before `on_logs_received` returns. The last shard
    stays open (rewritten atomically) until it holds `rows_per_shard` rows,
    also across runs; only then does the shard index advance.

    Redelivered batches are written again, so shards may contain duplicates
    after a retry; deduplicate on `log_id` downstream.
    """

    def __init__(
        self,
        shards_dir: ShardsDir,
        *,
        rows_per_shard: int = 100_000,
        codec: str = "zstd",
    ) -> None:
        if rows_per_shard < 1:
            raise ArgumentError(f"rows_per_shard must be >= 1, got {rows_per_shard}")
        self.shards_dir = shards_dir
        self.rows_per_shard = rows_per_shard
        self.codec = codec

        self._open_tbl: pa.Table | None = None
        self.shard_idx = self._init_from_existing()

    # ---------- init & helpers ----------

    def _init_from_existing(self) -> int:
        """Load last shard (if any). If it's partial, keep it open for topping up."""
        existing = self.shards_dir.list_shards()
        if not existing:
            return 0

        last_path = existing[-1]
        last_idx = int(os.path.basename(last_path).split("_")[1].split(".")[0])

        last_rows = pq.ParquetFile(last_path).metadata.num_rows
        if 0 < last_rows < self.rows_per_shard:
            self._open_tbl = pq.read_table(last_path)
            return last_idx
        return last_idx + 1

    def _atomic_write(self, out_path: Path, table: pa.Table) -> Path:
        """Write Parquet atomically (tmp + replace)."""
        tmp = out_path.with_suffix(".tmp")
        pq.write_table(table, tmp, compression=self.codec)
        os.replace(tmp, out_path)
        logger.debug("wrote %s (rows=%d, cols=%d)", out_path, len(table), len(table.schema))
        return out_path

    @property
    def _open_rows(self) -> int:
        return 0 if self._open_tbl is None else self._open_tbl.num_rows

    # ---------- core API ----------

    def add(self, table: pa.Table) -> list[Path]:
        """Append `table` to the open shard, spilling into new shards when full.

        Returns the shard paths that were written or rewritten.
        """
        written: list[Path] = []
        while table.num_rows:
            room = self.rows_per_shard - self._open_rows
            head, table = table.slice(0, room), table.slice(room)
            merged = (
                head
                if self._open_tbl is None
                else pa.concat_tables([self._open_tbl, head], promote_options="default")
            )
            written.append(self._atomic_write(self.shards_dir.shard_path(self.shard_idx), merged))

            if merged.num_rows >= self.rows_per_shard:
                self.shard_idx += 1
                self._open_tbl = None
            else:
                self._open_tbl = merged
        return written

    async def on_logs_received(self, batch: list[LogRecord]) -> None:
        if not batch:
            return
        table = records_to_table(batch)
        await asyncio.to_thread(self.add, table)
