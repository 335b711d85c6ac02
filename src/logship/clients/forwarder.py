from __future__ import annotations

import httpx

from logship.core.interfaces import ILogsHandler
from logship.core.models import LogRecord


class HttpForwardHandler(ILogsHandler):
    """Batch handler POSTing each batch as a JSON array to `url`.

    Any transport error or non-2xx response propagates, which makes the
    processor redeliver the batch.
    """

    def __init__(
        self,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        timeout_s: int = 20,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.client = httpx.AsyncClient(headers=headers, timeout=timeout_s, transport=transport)

    async def on_logs_received(self, batch: list[LogRecord]) -> None:
        if not batch:
            return
        r = await self.client.post(self.url, json=[record.to_json_dict() for record in batch])
        r.raise_for_status()

    async def aclose(self) -> None:
        await self.client.aclose()
