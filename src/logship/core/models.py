"""Core data models for log shipping runs.

This module defines:
- `LogRecord`: one log entry as returned by the log source. Only `_id`,
  `date` and `type` are interpreted; the source payload is kept as-is and
  is what sinks serialize.
- `RunStatus`: per-run record appended to the checkpoint document.
- `RunResult`: what a successful run returns.

Design notes
------------
- `RunStatus` serializes with camelCase keys so documents written by
  earlier exporters stay readable.
- Checkpoints are opaque strings (the source's log ids); `None` means
  "start from the beginning".
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator
from pydantic_core import to_jsonable_python

Checkpoint = str | None


# === Log source record ===


class LogRecord(BaseModel):
    """A single log entry, passed through to handlers unchanged."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    log_id: str | None = Field(default=None, alias="_id")
    date: datetime
    type: str

    _source: dict[str, Any] | None = PrivateAttr(default=None)

    @model_validator(mode="wrap")
    @classmethod
    def _keep_source(cls, data: Any, handler: Any) -> LogRecord:
        record = handler(data)
        # keyword construction by field name is not a source payload
        if isinstance(data, dict) and ("_id" in data or "log_id" not in data):
            record._source = dict(data)
        return record

    def timestamp_ms(self) -> float:
        return self.date.timestamp() * 1000

    def to_json_dict(self) -> dict[str, Any]:
        """The record as received: same keys, nulls and date string as the source."""
        if self._source is not None:
            return to_jsonable_python(self._source)
        return self.model_dump(by_alias=True, mode="json")


# === Run history ===


@dataclass(slots=True)
class RunStatus:
    """Outcome of one run, as stored in the checkpoint document."""

    start: float  # epoch ms
    end: float | None = None
    logs_processed: int = 0
    error: Any = None
    warning: str | None = None
    checkpoint: Checkpoint = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "start": self.start,
            "end": self.end,
            "logsProcessed": self.logs_processed,
            "checkpoint": self.checkpoint,
        }
        if self.error is not None:
            out["error"] = self.error
        if self.warning is not None:
            out["warning"] = self.warning
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RunStatus:
        return cls(
            start=data.get("start", 0),
            end=data.get("end"),
            logs_processed=int(data.get("logsProcessed", 0)),
            error=data.get("error"),
            warning=data.get("warning"),
            checkpoint=data.get("checkpoint"),
        )


@dataclass(kw_only=True)
class RunResult:
    """High-level output of a successful run."""

    status: RunStatus
    checkpoint: Checkpoint
