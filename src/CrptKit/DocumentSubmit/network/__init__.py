"""HTTP layer for registry calls: policy constants, client factory, transport."""

from CrptKit.DocumentSubmit.network.client import create_http_client
from CrptKit.DocumentSubmit.network.transport import HttpxTransport, Transport

__all__ = [
    "create_http_client",
    "HttpxTransport",
    "Transport",
]
