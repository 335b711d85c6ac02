"""Lightweight async client for the Auth0 Management API logs endpoint.

This module provides:
- `ManagementApiClient`: client-credentials token handling plus
  `get_logs(checkpoint, take)` over `/api/v2/logs`

It returns `LogRecord` models ready for batching. Every HTTP or transport
failure is raised as `LogSourceError`.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from logship.core.config import MAX_PAGE_SIZE, ClientConfig
from logship.core.errors import LogSourceError
from logship.core.models import Checkpoint, LogRecord

logger = logging.getLogger(__name__)

TOKEN_EXPIRY_MARGIN_S = 60


class ManagementApiClient:
    """Minimal async Management API client.

    Parameters
    ----------
    config : ClientConfig
        Tenant domain, client credentials and timeouts.
    transport : httpx.AsyncBaseTransport | None
        Optional transport override (tests use `httpx.MockTransport`).
    """

    def __init__(self, config: ClientConfig, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.config = config
        self.base_url = f"https://{config.domain}"
        self.audience = config.audience or f"{self.base_url}/api/v2/"
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(
                connect=config.timeout_s,
                read=config.timeout_s,
                write=config.timeout_s,
                pool=max(30, config.timeout_s * 3),
            ),
            limits=httpx.Limits(
                max_connections=config.max_connections,
                max_keepalive_connections=max(1, config.max_connections // 2),
            ),
            transport=transport,
        )
        self._token: str | None = None
        self._token_expires_at = 0.0

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            r = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise LogSourceError(f"{method} {url} failed: {type(e).__name__}: {e}") from e

        if r.status_code == 429:
            reset = r.headers.get("x-ratelimit-reset")
            raise LogSourceError(
                f"Rate limited by {self.config.domain} (x-ratelimit-reset={reset})",
                status_code=429,
            )
        if r.is_error:
            raise LogSourceError(
                f"{method} {url} returned {r.status_code}: {r.text[:200]}",
                status_code=r.status_code,
            )
        return r

    async def access_token(self) -> str:
        """Return a cached access token, fetching a new one when close to expiry."""
        if self._token and time.monotonic() < self._token_expires_at:
            return self._token

        r = await self._request(
            "POST",
            "/oauth/token",
            json={
                "grant_type": "client_credentials",
                "client_id": self.config.client_id,
                "client_secret": self.config.client_secret,
                "audience": self.audience,
            },
        )
        body = r.json()
        if "access_token" not in body:
            raise LogSourceError("Token response did not contain an access_token")
        self._token = body["access_token"]
        expires_in = int(body.get("expires_in", 86400))
        self._token_expires_at = time.monotonic() + max(0, expires_in - TOKEN_EXPIRY_MARGIN_S)
        logger.debug("Fetched management API token (expires in %ss)", expires_in)
        return self._token

    async def get_logs(self, *, checkpoint: Checkpoint, take: int) -> list[LogRecord]:
        """Fetch up to `take` logs following `checkpoint` (oldest first)."""
        params: dict[str, Any] = {"take": max(1, min(take, MAX_PAGE_SIZE))}
        if checkpoint:
            params["from"] = checkpoint

        token = await self.access_token()
        r = await self._request(
            "GET",
            "/api/v2/logs",
            params=params,
            headers={"Authorization": f"Bearer {token}"},
        )
        try:
            return [LogRecord.model_validate(raw) for raw in r.json()]
        except ValueError as e:
            raise LogSourceError(f"Malformed logs page: {e}") from e

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()
