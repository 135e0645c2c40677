"""HTTPX client factory for registry calls.

Each :class:`~CrptKit.DocumentSubmit.api.CrptApi` owns one client (and with it
one connection pool) for its whole lifetime; there is no process-wide
singleton, so independent API instances never share sockets or limits.

Example:
    >>> from CrptKit.DocumentSubmit.network import create_http_client
    >>> client = create_http_client(connect_timeout=5.0)
    >>> client.close()
"""

from __future__ import annotations

import logging
import ssl
from typing import Optional

import certifi
import httpx

from CrptKit.DocumentSubmit.network.policy import (
    FOLLOW_REDIRECTS,
    HTTP2_ENABLED,
    HTTP_CONNECT_TIMEOUT,
    HTTP_REQUEST_TIMEOUT,
    KEEPALIVE_EXPIRY,
    MAX_CONNECTIONS,
    MAX_KEEPALIVE_CONNECTIONS,
    TLS_VERIFY_ENABLED,
)

logger = logging.getLogger(__name__)


def _create_ssl_context(verify: bool = TLS_VERIFY_ENABLED) -> ssl.SSLContext:
    """Return the TLS context for registry connections.

    The registry endpoints present public CA chains, so verification uses the
    certifi bundle rather than the host store.  ``verify=False`` is meant for
    local stubs only and is logged loudly.
    """
    context = ssl.create_default_context(cafile=certifi.where())
    if not verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
        logger.warning(
            "TLS verification DISABLED for registry client",
            extra={"cafile": certifi.where()},
        )
    return context


def create_http_client(
    *,
    request_timeout: float = HTTP_REQUEST_TIMEOUT,
    connect_timeout: Optional[float] = None,
    http2: bool = HTTP2_ENABLED,
    verify_tls: bool = TLS_VERIFY_ENABLED,
    transport: Optional[httpx.BaseTransport] = None,
) -> httpx.Client:
    """Create the HTTPX client used for create-document calls.

    Args:
        request_timeout: Default timeout for reads, writes, and pool waits.
        connect_timeout: Connection timeout; defaults to the smaller of
            ``request_timeout`` and the policy default.
        http2: Negotiate HTTP/2 (needs the ``httpx[http2]`` extra).
        verify_tls: Verify server certificates against the certifi bundle.
        transport: Optional HTTPX transport override (tests use ``httpx.MockTransport``).

    Returns:
        Configured httpx.Client
    """
    if connect_timeout is None:
        connect_timeout = min(request_timeout, HTTP_CONNECT_TIMEOUT)

    client = httpx.Client(
        transport=transport,
        timeout=httpx.Timeout(request_timeout, connect=connect_timeout),
        limits=httpx.Limits(
            max_connections=MAX_CONNECTIONS,
            max_keepalive_connections=MAX_KEEPALIVE_CONNECTIONS,
            keepalive_expiry=KEEPALIVE_EXPIRY,
        ),
        http2=http2,
        follow_redirects=FOLLOW_REDIRECTS,
        verify=_create_ssl_context(verify_tls),
    )

    logger.debug(
        "HTTPX client created",
        extra={
            "http2": http2,
            "max_connections": MAX_CONNECTIONS,
            "request_timeout": request_timeout,
            "connect_timeout": connect_timeout,
        },
    )
    return client


__all__ = ["create_http_client"]
