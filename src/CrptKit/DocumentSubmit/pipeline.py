# === NAVMAP v1 ===
# {
#   "module": "CrptKit.DocumentSubmit.pipeline",
#   "purpose": "Admission-controlled request assembly and response classification for create-document calls",
#   "sections": [
#     {"id": "pipeline", "name": "SubmissionPipeline", "anchor": "class-submissionpipeline", "kind": "class"},
#     {"id": "helpers", "name": "Argument helpers", "anchor": "HLP", "kind": "helpers"}
#   ]
# }
# === /NAVMAP ===

"""Admission-controlled submission of introduce-goods documents.

One :meth:`SubmissionPipeline.submit` call runs these stages in order:

1. admission: wait for a permit from the shared :class:`RateLimiter`
2. encode: document -> canonical JSON bytes -> Base64 ``product_document``
3. envelope: fixed ``MANUAL`` / ``LP_INTRODUCE_GOODS`` body plus the signature
4. transport: ``POST {base}/lk/documents/create?pg=<product group>``
5. classify: 2xx -> success payload, anything else -> typed failure

The pipeline keeps no per-call state, so a single instance may be shared by
any number of threads.  A permit is spent as soon as admission succeeds; a
request that later times out or is rejected does not refund it.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from CrptKit.DocumentSubmit.cancellation import CancellationToken
from CrptKit.DocumentSubmit.encoding import DocumentEncoder, JsonDocumentEncoder
from CrptKit.DocumentSubmit.envelope import CreateDocumentEnvelope
from CrptKit.DocumentSubmit.errors import (
    DocumentEncodingError,
    DocumentSubmitError,
    InvalidArgumentError,
    RemoteRejected,
    SubmissionFailure,
    TransportFailure,
)
from CrptKit.DocumentSubmit.network.policy import (
    ACCEPT_ANY,
    AUTHORIZATION_SCHEME,
    CONTENT_TYPE_JSON,
    CREATE_DOCUMENT_PATH,
    HEADER_ACCEPT,
    HEADER_AUTHORIZATION,
    HEADER_CONTENT_TYPE,
    HTTP_REQUEST_TIMEOUT,
    HTTP_SUCCESS_MAX,
    HTTP_SUCCESS_MIN,
    PRODUCT_GROUP_QUERY_PARAMETER,
)
from CrptKit.DocumentSubmit.network.transport import Transport
from CrptKit.DocumentSubmit.outcome import SubmissionOutcome
from CrptKit.DocumentSubmit.ratelimit.limiter import RateLimiter

logger = logging.getLogger(__name__)

__all__ = ["SubmissionPipeline", "normalize_base_url"]


class SubmissionPipeline:
    """Turns a document plus detached signature into a registry call and outcome."""

    def __init__(
        self,
        *,
        base_url: str,
        rate_limiter: RateLimiter,
        transport: Transport,
        encoder: Optional[DocumentEncoder] = None,
        request_timeout: float = HTTP_REQUEST_TIMEOUT,
    ) -> None:
        """Create a pipeline.

        Args:
            base_url: API root, e.g. ``https://ismp.crpt.ru/api/v3``.
            rate_limiter: Admission gate shared by every caller of this pipeline.
            transport: Collaborator performing the HTTP exchange.
            encoder: Document serializer; defaults to :class:`JsonDocumentEncoder`.
            request_timeout: Per-request timeout in seconds (> 0).

        Raises:
            InvalidArgumentError: If the base URL or timeout is invalid.
        """
        if not request_timeout or request_timeout <= 0:
            raise InvalidArgumentError("request_timeout must be positive")
        self._base_url = normalize_base_url(base_url)
        self._create_url = self._base_url + CREATE_DOCUMENT_PATH
        self._rate_limiter = rate_limiter
        self._transport = transport
        self._encoder: DocumentEncoder = encoder if encoder is not None else JsonDocumentEncoder()
        self._request_timeout = float(request_timeout)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def request_timeout(self) -> float:
        return self._request_timeout

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._rate_limiter

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def submit(
        self,
        bearer_token: str,
        routing_key: str,
        document: Any,
        signature_base64: str,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> SubmissionOutcome:
        """Submit ``document`` to the create-document endpoint.

        Args:
            bearer_token: Access token sent as ``Authorization: Bearer <token>``.
            routing_key: Product group, sent as the ``pg`` query parameter.
            document: Source document (pydantic model or mapping).
            signature_base64: Detached signature over the Base64 document text,
                computed by the caller beforehand.
            cancel_token: Optional token that aborts the admission wait.

        Returns:
            SubmissionOutcome carrying the raw response body on 2xx, otherwise
            a DocumentEncodingError, TransportFailure, or RemoteRejected.

        Raises:
            InvalidArgumentError: If an argument is ``None`` or the envelope has
                a blank field.
            AdmissionCancelled: If the wait for a permit was aborted.
        """
        _require_present(bearer_token, "bearer_token")
        _require_present(routing_key, "routing_key")
        _require_present(document, "document")
        _require_present(signature_base64, "signature_base64")

        self._rate_limiter.acquire(cancel_token)

        try:
            product_document = self.encode_document(document)
        except DocumentEncodingError as exc:
            logger.warning("Document encoding failed", extra={"pg": routing_key, "error": str(exc)})
            return SubmissionOutcome.failed(exc)

        envelope = CreateDocumentEnvelope.introduce_goods(product_document, signature_base64)

        try:
            body = self._encode_bytes(envelope.to_payload())
        except DocumentEncodingError as exc:
            logger.warning("Envelope encoding failed", extra={"pg": routing_key, "error": str(exc)})
            return SubmissionOutcome.failed(exc)

        request = self.build_request(bearer_token, routing_key, body)

        try:
            response = self._transport.send(request, self._request_timeout)
        except SubmissionFailure as exc:
            logger.warning("Create-document request failed", extra={"pg": routing_key, "error": str(exc)})
            return SubmissionOutcome.failed(exc)
        except DocumentSubmitError:
            raise
        except Exception as exc:
            failure = TransportFailure(f"Failed to create document: {exc}")
            failure.__cause__ = exc
            logger.warning(
                "Create-document request failed",
                extra={"pg": routing_key, "error": str(exc), "error_type": type(exc).__name__},
            )
            return SubmissionOutcome.failed(failure)

        return self.classify(response, routing_key=routing_key)

    def encode_document(self, document: Any) -> str:
        """Return the Base64 ``product_document`` text for ``document``.

        This is the exact text the caller must sign; :meth:`submit` produces
        the same bytes for the same document.

        Raises:
            DocumentEncodingError: If the encoder fails for any reason.
        """
        data = self._encode_bytes(document)
        try:
            return self._encoder.to_base64(data)
        except DocumentEncodingError:
            raise
        except Exception as exc:
            raise DocumentEncodingError(f"Failed to Base64-encode document: {exc}") from exc

    def _encode_bytes(self, value: Any) -> bytes:
        # Injected encoders may fail with arbitrary serialization errors.
        try:
            return self._encoder.encode(value)
        except DocumentEncodingError:
            raise
        except Exception as exc:
            raise DocumentEncodingError(f"Failed to serialize document: {exc}") from exc

    def build_request(self, bearer_token: str, routing_key: str, body: bytes) -> httpx.Request:
        """Assemble the create-document HTTP request."""
        return httpx.Request(
            "POST",
            self._create_url,
            params={PRODUCT_GROUP_QUERY_PARAMETER: routing_key},
            headers={
                HEADER_AUTHORIZATION: f"{AUTHORIZATION_SCHEME} {bearer_token}",
                HEADER_CONTENT_TYPE: CONTENT_TYPE_JSON,
                HEADER_ACCEPT: ACCEPT_ANY,
            },
            content=body,
        )

    @staticmethod
    def classify(response: httpx.Response, *, routing_key: Optional[str] = None) -> SubmissionOutcome:
        """Map a registry response onto a :class:`SubmissionOutcome`."""
        status = response.status_code
        text = response.text
        if HTTP_SUCCESS_MIN <= status < HTTP_SUCCESS_MAX:
            logger.info("Document accepted", extra={"pg": routing_key, "status": status})
            return SubmissionOutcome.succeeded(text)

        logger.warning("Document rejected", extra={"pg": routing_key, "status": status})
        return SubmissionOutcome.failed(RemoteRejected(status, text))

    def close(self) -> None:
        """Stop the limiter clock and release the transport.  Idempotent."""
        self._rate_limiter.shutdown()
        self._transport.close()

    def __enter__(self) -> "SubmissionPipeline":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


# ============================================================================
# Argument helpers
# ============================================================================


def _require_present(value: Any, name: str) -> None:
    if value is None:
        raise InvalidArgumentError(f"{name} is None")


def normalize_base_url(base_url: Optional[str]) -> str:
    """Validate ``base_url`` and strip a single trailing slash.

    Raises:
        InvalidArgumentError: If the URL is blank or not an absolute http(s) URL.
    """
    if base_url is None or not base_url.strip():
        raise InvalidArgumentError("base_url is blank")
    url = base_url.strip()
    if url.endswith("/"):
        url = url[:-1]
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as exc:
        raise InvalidArgumentError(f"base_url is not a valid URL: {exc}") from exc
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise InvalidArgumentError(f"base_url must be an absolute http(s) URL, got {base_url!r}")
    return url
