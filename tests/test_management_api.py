import httpx
import pytest

from logship.clients.management_api import ManagementApiClient
from logship.core.config import ClientConfig
from logship.core.errors import ArgumentError, LogSourceError


def _config() -> ClientConfig:
    return ClientConfig(domain="tenant.example.com", client_id="id", client_secret="secret")


class FakeTenant:
    """Serves the token and logs endpoints, recording requests."""

    def __init__(self, logs_status: int = 200, logs: list | None = None) -> None:
        self.logs_status = logs_status
        self.logs = logs if logs is not None else []
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/oauth/token":
            return httpx.Response(200, json={"access_token": "tok", "expires_in": 86400})
        if request.url.path == "/api/v2/logs":
            if self.logs_status == 429:
                return httpx.Response(429, headers={"x-ratelimit-reset": "1700000000"})
            if self.logs_status != 200:
                return httpx.Response(self.logs_status, text="upstream failure")
            return httpx.Response(200, json=self.logs)
        return httpx.Response(404)


def test_client_config_requires_credentials() -> None:
    with pytest.raises(ArgumentError):
        ClientConfig(domain="tenant.example.com", client_id="", client_secret="")


@pytest.mark.asyncio
async def test_get_logs_sends_checkpoint_and_token() -> None:
    tenant = FakeTenant(
        logs=[
            {"_id": "100", "date": "2024-03-01T11:00:00.000Z", "type": "s", "user_id": "u1"},
            {"_id": "101", "date": "2024-03-01T11:01:00.000Z", "type": "f"},
        ]
    )
    client = ManagementApiClient(_config(), transport=httpx.MockTransport(tenant))
    try:
        logs = await client.get_logs(checkpoint="99", take=250)
        await client.get_logs(checkpoint="101", take=10)
    finally:
        await client.aclose()

    assert [log.log_id for log in logs] == ["100", "101"]
    assert logs[0].model_extra == {"user_id": "u1"}

    token_requests = [r for r in tenant.requests if r.url.path == "/oauth/token"]
    log_requests = [r for r in tenant.requests if r.url.path == "/api/v2/logs"]
    assert len(token_requests) == 1
    assert log_requests[0].url.params["from"] == "99"
    assert log_requests[0].url.params["take"] == "100"
    assert log_requests[1].url.params["take"] == "10"
    assert log_requests[0].headers["Authorization"] == "Bearer tok"


@pytest.mark.asyncio
async def test_get_logs_without_checkpoint_omits_from() -> None:
    tenant = FakeTenant()
    client = ManagementApiClient(_config(), transport=httpx.MockTransport(tenant))
    try:
        assert await client.get_logs(checkpoint=None, take=5) == []
    finally:
        await client.aclose()

    assert "from" not in tenant.requests[-1].url.params


@pytest.mark.asyncio
async def test_http_errors_become_log_source_errors() -> None:
    client = ManagementApiClient(_config(), transport=httpx.MockTransport(FakeTenant(logs_status=500)))
    try:
        with pytest.raises(LogSourceError) as exc_info:
            await client.get_logs(checkpoint="1", take=5)
    finally:
        await client.aclose()

    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_rate_limit_is_reported() -> None:
    client = ManagementApiClient(_config(), transport=httpx.MockTransport(FakeTenant(logs_status=429)))
    try:
        with pytest.raises(LogSourceError, match="1700000000") as exc_info:
            await client.get_logs(checkpoint="1", take=5)
    finally:
        await client.aclose()

    assert exc_info.value.status_code == 429


@pytest.mark.asyncio
async def test_transport_errors_become_log_source_errors() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = ManagementApiClient(_config(), transport=httpx.MockTransport(refuse))
    try:
        with pytest.raises(LogSourceError, match="ConnectError"):
            await client.get_logs(checkpoint="1", take=5)
    finally:
        await client.aclose()
