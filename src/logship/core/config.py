from __future__ import annotations

from dataclasses import dataclass, field

from logship.core.errors import ArgumentError

MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class ProcessorConfig:
    """Configuration for one logs processor run."""

    domain: str
    client_id: str = ""
    client_secret: str = ""
    batch_size: int = 100
    max_retries: int = 5
    max_run_time_seconds: int = 20
    start_from: str | None = None  # fallback checkpoint when nothing is persisted
    log_types: list[str] = field(default_factory=list)
    log_level: int | None = None  # minimum severity, expanded via the log type table
    storage_limit_kib: int = 400  # size bound of the checkpoint document

    def __post_init__(self) -> None:
        if not self.domain:
            raise ArgumentError("domain is required")
        if self.batch_size < 1:
            raise ArgumentError("batch_size must be >= 1")
        if self.max_retries < 0:
            raise ArgumentError("max_retries must be >= 0")
        if self.max_run_time_seconds < 0:
            raise ArgumentError("max_run_time_seconds must be >= 0")
        if self.storage_limit_kib < 0:
            raise ArgumentError("storage_limit_kib must be >= 0")


@dataclass(frozen=True)
class ClientConfig:
    """Configuration for the management API client."""

    domain: str
    client_id: str
    client_secret: str
    timeout_s: int = 20
    max_connections: int = 8
    audience: str | None = None  # defaults to https://<domain>/api/v2/

    def __post_init__(self) -> None:
        if not self.domain:
            raise ArgumentError("domain is required")
        if not (self.client_id and self.client_secret):
            raise ArgumentError("client_id and client_secret are required")

    @classmethod
    def from_processor_config(cls, config: ProcessorConfig, *, timeout_s: int = 20) -> ClientConfig:
        return cls(
            domain=config.domain,
            client_id=config.client_id,
            client_secret=config.client_secret,
            timeout_s=timeout_s,
        )
