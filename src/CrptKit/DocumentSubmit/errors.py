"""Exception hierarchy shared across admission, encoding, and transport.

A submission passes through rate-limit admission, document encoding, envelope
assembly, and an HTTPS round trip.  This module groups the failure modes of
those stages into a small hierarchy so callers can react to categories (for
example, a rejected document vs. a dropped connection) while still reading the
HTTP status code and response body where the registry supplied one.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "DocumentSubmitError",
    "InvalidArgumentError",
    "AdmissionCancelled",
    "SubmissionFailure",
    "DocumentEncodingError",
    "TransportFailure",
    "RemoteRejected",
]


class DocumentSubmitError(RuntimeError):
    """Base exception for document submission failures."""


class InvalidArgumentError(DocumentSubmitError, ValueError):
    """Raised when configuration or a required submission field is invalid."""


class AdmissionCancelled(DocumentSubmitError):
    """Raised when a wait for a rate-limit permit is aborted.

    Either the caller's cancellation token fired or the limiter was shut down
    while the caller was still queued.  No permit is consumed in either case.
    """


class SubmissionFailure(DocumentSubmitError):
    """Failure reported through a :class:`SubmissionOutcome`."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DocumentEncodingError(SubmissionFailure):
    """Raised when the document or envelope cannot be serialized to JSON."""


class TransportFailure(SubmissionFailure):
    """Raised when the HTTP round trip fails (connect, TLS, timeout, protocol)."""


class RemoteRejected(SubmissionFailure):
    """Raised when the registry answers with a status outside ``[200, 300)``."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Registry API error: HTTP {status_code} - {body}", status_code=status_code)
        self.body = body
