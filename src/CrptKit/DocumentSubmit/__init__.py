# === NAVMAP v1 ===
# {
#   "module": "CrptKit.DocumentSubmit",
#   "purpose": "Package initialization for CrptKit.DocumentSubmit",
#   "sections": [
#     {
#       "id": "getattr",
#       "name": "__getattr__",
#       "anchor": "function-getattr",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Public API for the rate-limited product-marking registry client.

The facade exposes the client, its document model, the admission limiter, and
the error hierarchy.  Heavy modules (HTTPX, pydantic-settings) are imported
lazily on first attribute access.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any, Dict, Tuple

__version__ = "0.1.0"

_EXPORTS: Dict[str, Tuple[str, str]] = {
    "CrptApi": ("CrptKit.DocumentSubmit.api", "CrptApi"),
    "SubmissionPipeline": ("CrptKit.DocumentSubmit.pipeline", "SubmissionPipeline"),
    "SubmissionOutcome": ("CrptKit.DocumentSubmit.outcome", "SubmissionOutcome"),
    "CreateDocumentEnvelope": ("CrptKit.DocumentSubmit.envelope", "CreateDocumentEnvelope"),
    "IntroduceGoodsDocument": ("CrptKit.DocumentSubmit.documents", "IntroduceGoodsDocument"),
    "Description": ("CrptKit.DocumentSubmit.documents", "Description"),
    "Product": ("CrptKit.DocumentSubmit.documents", "Product"),
    "JsonDocumentEncoder": ("CrptKit.DocumentSubmit.encoding", "JsonDocumentEncoder"),
    "RateLimiter": ("CrptKit.DocumentSubmit.ratelimit.limiter", "RateLimiter"),
    "WindowUnit": ("CrptKit.DocumentSubmit.ratelimit.config", "WindowUnit"),
    "CancellationToken": ("CrptKit.DocumentSubmit.cancellation", "CancellationToken"),
    "HttpxTransport": ("CrptKit.DocumentSubmit.network.transport", "HttpxTransport"),
    "SubmitSettings": ("CrptKit.DocumentSubmit.settings", "SubmitSettings"),
    "DocumentSubmitError": ("CrptKit.DocumentSubmit.errors", "DocumentSubmitError"),
    "InvalidArgumentError": ("CrptKit.DocumentSubmit.errors", "InvalidArgumentError"),
    "AdmissionCancelled": ("CrptKit.DocumentSubmit.errors", "AdmissionCancelled"),
    "SubmissionFailure": ("CrptKit.DocumentSubmit.errors", "SubmissionFailure"),
    "DocumentEncodingError": ("CrptKit.DocumentSubmit.errors", "DocumentEncodingError"),
    "TransportFailure": ("CrptKit.DocumentSubmit.errors", "TransportFailure"),
    "RemoteRejected": ("CrptKit.DocumentSubmit.errors", "RemoteRejected"),
}

__all__ = [*_EXPORTS, "__version__"]


def __getattr__(name: str) -> Any:
    """Lazily import public exports."""
    target = _EXPORTS.get(name)
    if target is None:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
    module = import_module(target[0])
    value = getattr(module, target[1])
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(set(globals()) | set(__all__))
