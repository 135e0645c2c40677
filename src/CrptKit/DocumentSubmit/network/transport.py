"""Transport capability consumed by the submission pipeline.

The pipeline assembles an :class:`httpx.Request` and hands it to a
:class:`Transport`.  :class:`HttpxTransport` is the production implementation;
tests substitute an ``httpx.MockTransport`` underneath it or provide their own
object with a compatible ``send`` method.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional, Protocol, runtime_checkable

import httpx

from CrptKit.DocumentSubmit.network.client import create_http_client

logger = logging.getLogger(__name__)

__all__ = ["Transport", "HttpxTransport"]


@runtime_checkable
class Transport(Protocol):
    """Sends one request and returns the complete response."""

    def send(self, request: httpx.Request, timeout: float) -> httpx.Response:
        """Send ``request`` within ``timeout`` seconds.

        Raises:
            httpx.HTTPError: On connection, TLS, timeout, or protocol failures.
                The pipeline reports any other exception as a TransportFailure too.
        """

    def close(self) -> None:
        """Release pooled connections."""


class HttpxTransport:
    """Transport backed by a pooled :class:`httpx.Client`.

    The client is closed by :meth:`close` only if this transport created it.
    """

    def __init__(self, client: Optional[httpx.Client] = None, **client_options: Any) -> None:
        """Wrap ``client``, or build one from ``client_options`` via :func:`create_http_client`."""
        self._owns_client = client is None
        self._client = client if client is not None else create_http_client(**client_options)
        self._closed = False
        self._lock = threading.Lock()

    @property
    def client(self) -> httpx.Client:
        return self._client

    def send(self, request: httpx.Request, timeout: float) -> httpx.Response:
        request.extensions["timeout"] = httpx.Timeout(timeout).as_dict()
        response = self._client.send(request)
        # Body is read eagerly by send(); the connection is already released.
        logger.debug(
            "HTTP exchange completed",
            extra={
                "method": request.method,
                "host": request.url.host,
                "path": request.url.path,
                "status": response.status_code,
            },
        )
        return response

    def close(self) -> None:
        """Close the underlying client if owned.  Safe to call multiple times."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        if self._owns_client:
            self._client.close()
            logger.debug("HTTP client closed")
