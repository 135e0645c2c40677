"""Client for the registry's single create-document method.

:class:`CrptApi` wires one :class:`RateLimiter`, one pooled HTTPX transport,
and a :class:`SubmissionPipeline` together.  It is thread-safe: share one
instance between all threads that submit on behalf of the same quota.

Example:
    >>> from CrptKit.DocumentSubmit import CrptApi, IntroduceGoodsDocument, WindowUnit
    >>> with CrptApi(WindowUnit.SECOND, 10, "https://ismp.crpt.ru/api/v3", 30.0) as api:
    ...     body = api.create_introduce_goods_document(token, "milk", document, signature)
"""

from __future__ import annotations

import logging
import threading
from datetime import timedelta
from typing import Any, Optional, Union

import httpx

from CrptKit.DocumentSubmit.cancellation import CancellationToken
from CrptKit.DocumentSubmit.documents import IntroduceGoodsDocument
from CrptKit.DocumentSubmit.encoding import DocumentEncoder
from CrptKit.DocumentSubmit.errors import AdmissionCancelled, InvalidArgumentError
from CrptKit.DocumentSubmit.network.policy import HTTP2_ENABLED, TLS_VERIFY_ENABLED
from CrptKit.DocumentSubmit.network.transport import HttpxTransport, Transport
from CrptKit.DocumentSubmit.outcome import SubmissionOutcome
from CrptKit.DocumentSubmit.pipeline import SubmissionPipeline, normalize_base_url
from CrptKit.DocumentSubmit.ratelimit.config import WindowUnit
from CrptKit.DocumentSubmit.ratelimit.limiter import RateLimiter
from CrptKit.DocumentSubmit.settings import SubmitSettings

logger = logging.getLogger(__name__)

__all__ = ["CrptApi"]


class CrptApi:
    """Rate-limited, thread-safe registry client.

    Attributes:
        pipeline: The submission pipeline shared by all callers.
    """

    def __init__(
        self,
        window_unit: Union[WindowUnit, str],
        max_requests_per_window: int,
        base_url: str,
        request_timeout: Union[float, timedelta],
        *,
        transport: Optional[Transport] = None,
        encoder: Optional[DocumentEncoder] = None,
        http_transport: Optional[httpx.BaseTransport] = None,
        connect_timeout: Optional[float] = None,
        http2: bool = HTTP2_ENABLED,
        verify_tls: bool = TLS_VERIFY_ENABLED,
    ) -> None:
        """Create a client with its own limiter and connection pool.

        Args:
            window_unit: Length of one rate-limit window (second, minute, ...).
            max_requests_per_window: Calls allowed per window (> 0).
            base_url: API root, e.g. ``https://ismp.crpt.ru/api/v3`` (production)
                or ``https://markirovka.demo.crpt.tech/api/v3`` (demo).
            request_timeout: Per-request timeout, seconds or ``timedelta`` (> 0).
            transport: Ready-made transport collaborator; overrides HTTPX setup.
            encoder: Document encoder; defaults to canonical JSON.
            http_transport: Low-level HTTPX transport (tests use ``httpx.MockTransport``).
            connect_timeout: Connection timeout for the default client (seconds).
            http2: Negotiate HTTP/2 on the default client.
            verify_tls: Verify server certificates on the default client.

        Raises:
            InvalidArgumentError: On any invalid argument.
        """
        if window_unit is None:
            raise InvalidArgumentError("window_unit is None")
        unit = WindowUnit.parse(window_unit)
        if isinstance(max_requests_per_window, bool) or not isinstance(max_requests_per_window, int):
            raise InvalidArgumentError("max_requests_per_window must be an integer")
        if max_requests_per_window <= 0:
            raise InvalidArgumentError("max_requests_per_window must be greater than zero")
        normalized_url = normalize_base_url(base_url)
        timeout_s = _timeout_seconds(request_timeout)

        if transport is None:
            transport = HttpxTransport(
                request_timeout=timeout_s,
                connect_timeout=connect_timeout,
                http2=http2,
                verify_tls=verify_tls,
                transport=http_transport,
            )
            self._owns_http_client = True
        else:
            self._owns_http_client = False

        rate_limiter = RateLimiter(max_requests_per_window, unit, name="crpt-api")
        self.pipeline = SubmissionPipeline(
            base_url=normalized_url,
            rate_limiter=rate_limiter,
            transport=transport,
            encoder=encoder,
            request_timeout=timeout_s,
        )
        self._transport = transport
        self._close_lock = threading.Lock()
        self._closed = False

        logger.debug(
            "Registry client created",
            extra={
                "base_url": normalized_url,
                "window_unit": unit.value,
                "max_requests_per_window": max_requests_per_window,
                "request_timeout": timeout_s,
            },
        )

    @classmethod
    def from_settings(
        cls,
        settings: SubmitSettings,
        *,
        transport: Optional[Transport] = None,
        http_transport: Optional[httpx.BaseTransport] = None,
    ) -> "CrptApi":
        """Create a client from :class:`SubmitSettings`."""
        return cls(
            settings.window_unit,
            settings.max_requests_per_window,
            settings.base_url,
            settings.request_timeout_s,
            transport=transport,
            http_transport=http_transport,
            connect_timeout=settings.connect_timeout_s,
            http2=settings.http2,
            verify_tls=settings.verify_tls,
        )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def submit(
        self,
        bearer_token: str,
        product_group: str,
        document: Union[IntroduceGoodsDocument, Any],
        signature_base64: str,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> SubmissionOutcome:
        """Submit an introduce-goods document and return the typed outcome.

        Raises:
            AdmissionCancelled: If the client has been closed.
        """
        if self._closed:
            raise AdmissionCancelled("Registry client is closed")
        return self.pipeline.submit(
            bearer_token,
            product_group,
            document,
            signature_base64,
            cancel_token=cancel_token,
        )

    def create_introduce_goods_document(
        self,
        bearer_token: str,
        product_group: str,
        document: Union[IntroduceGoodsDocument, Any],
        signature_base64: str,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> str:
        """Create an "introduce goods (produced in RF)" document.

        Blocks while the call quota is exhausted, then sends the document.

        Returns:
            The response body on a 2xx status.

        Raises:
            InvalidArgumentError: On a missing argument or blank envelope field.
            AdmissionCancelled: If the wait for a permit was aborted or the client
                is closed.
            DocumentEncodingError: If the document cannot be serialized.
            TransportFailure: On network, TLS, or timeout errors.
            RemoteRejected: On any non-2xx status (status code and body kept).
        """
        return self.submit(
            bearer_token,
            product_group,
            document,
            signature_base64,
            cancel_token=cancel_token,
        ).unwrap()

    def encode_document(self, document: Union[IntroduceGoodsDocument, Any]) -> str:
        """Return the Base64 ``product_document`` text the caller must sign."""
        return self.pipeline.encode_document(document)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Stop the limiter clock and release pooled connections.  Idempotent."""
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        self.pipeline.rate_limiter.shutdown()
        if self._owns_http_client:
            self._transport.close()
        logger.debug("Registry client closed")

    def __enter__(self) -> "CrptApi":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _timeout_seconds(timeout: Union[float, int, timedelta, None]) -> float:
    if timeout is None or isinstance(timeout, bool):
        raise InvalidArgumentError("request_timeout must be positive")
    seconds = timeout.total_seconds() if isinstance(timeout, timedelta) else float(timeout)
    if seconds <= 0:
        raise InvalidArgumentError("request_timeout must be positive")
    return seconds
