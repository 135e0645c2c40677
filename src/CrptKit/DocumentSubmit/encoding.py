"""Canonical JSON + Base64 encoding for documents and request envelopes.

The caller signs the Base64 text of the encoded document, and the very same
text is transmitted in ``product_document``.  Encoding therefore has to be
deterministic: the same document always yields byte-identical output.  Pydantic
models are dumped by alias with ``None`` fields dropped; plain mappings keep
their insertion order.  Both use compact separators and UTF-8.
"""

from __future__ import annotations

import base64
import json
from typing import Any, Mapping, Protocol, runtime_checkable

from pydantic import BaseModel
from pydantic_core import PydanticSerializationError

from CrptKit.DocumentSubmit.errors import DocumentEncodingError

__all__ = ["DocumentEncoder", "JsonDocumentEncoder"]


@runtime_checkable
class DocumentEncoder(Protocol):
    """Serialization capability consumed by the submission pipeline."""

    def encode(self, document: Any) -> bytes:
        """Serialize ``document`` to canonical bytes or raise DocumentEncodingError."""

    def to_base64(self, data: bytes) -> str:
        """Return the standard (padded) Base64 text of ``data``."""


class JsonDocumentEncoder:
    """Default encoder: compact UTF-8 JSON with ``None`` fields omitted."""

    def encode(self, document: Any) -> bytes:
        try:
            if isinstance(document, BaseModel):
                return document.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")
            if isinstance(document, Mapping):
                return self._dumps(document)
        except (PydanticSerializationError, TypeError, ValueError) as exc:
            raise DocumentEncodingError(f"Failed to serialize document: {exc}") from exc
        raise DocumentEncodingError(
            f"Unsupported document type {type(document).__name__}; "
            "expected a pydantic model or a mapping"
        )

    def to_base64(self, data: bytes) -> str:
        return base64.b64encode(data).decode("ascii")

    @staticmethod
    def _dumps(value: Mapping[str, Any]) -> bytes:
        return json.dumps(
            dict(value),
            ensure_ascii=False,
            separators=(",", ":"),
            allow_nan=False,
        ).encode("utf-8")
