"""Log source and forwarding clients.

This package provides:
- ManagementApiClient: async Management API client for `/api/v2/logs`
- LogsApiStream / LogsApiStreamFactory: checkpointed page stream over it
- HttpForwardHandler: batch handler forwarding logs to an HTTP endpoint
"""

from logship.clients.forwarder import HttpForwardHandler
from logship.clients.logs_stream import LogsApiStream, LogsApiStreamFactory
from logship.clients.management_api import ManagementApiClient

__all__ = [
    "HttpForwardHandler",
    "LogsApiStream",
    "LogsApiStreamFactory",
    "ManagementApiClient",
]
