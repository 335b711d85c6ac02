"""Exception hierarchy shared by the processor, stores and clients."""

from __future__ import annotations

from typing import Any


class LogshipError(Exception):
    """Base class for all logship errors."""


class ArgumentError(LogshipError, ValueError):
    """Invalid construction input, rejected before any run starts."""


class LogSourceError(LogshipError):
    """The log source failed to fetch, authenticate or transport a page."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SkipRangeError(LogshipError):
    """Retries were exhausted; the checkpoint span of the abandoned batch is skipped."""

    def __init__(
        self,
        *,
        from_checkpoint: str | None,
        to_checkpoint: str | None,
        retries: int,
        cause: BaseException,
    ) -> None:
        self.from_checkpoint = from_checkpoint
        self.to_checkpoint = to_checkpoint
        self.retries = retries
        self.cause = cause
        super().__init__(
            f"Skipping logs from {from_checkpoint} to {to_checkpoint} "
            f"after {retries} retries: {cause}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": str(self),
            "from": self.from_checkpoint,
            "to": self.to_checkpoint,
            "retries": self.retries,
            "cause": str(self.cause),
        }
