"""Request body of the registry's single create-document method.

``POST /lk/documents/create`` takes a four-field JSON object:

- ``document_format``: how the document was produced (``MANUAL``)
- ``type``: the operation (``LP_INTRODUCE_GOODS`` for introducing goods)
- ``product_document``: Base64 of the JSON-encoded source document
- ``signature``: Base64 detached signature over the ``product_document`` text

The product group travels in the ``pg`` query parameter and is not part of
this body.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from CrptKit.DocumentSubmit.errors import InvalidArgumentError

__all__ = [
    "DOCUMENT_FORMAT_MANUAL",
    "DOCUMENT_TYPE_INTRODUCE_GOODS",
    "CreateDocumentEnvelope",
    "require_non_blank",
]

DOCUMENT_FORMAT_MANUAL = "MANUAL"
DOCUMENT_TYPE_INTRODUCE_GOODS = "LP_INTRODUCE_GOODS"


def require_non_blank(value: Optional[str], name: str) -> str:
    """Return ``value`` unchanged, or raise if it is ``None``, empty, or whitespace."""
    if value is None or not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(f"{name} is blank")
    return value


@dataclass(frozen=True)
class CreateDocumentEnvelope:
    """Immutable create-document request body; all fields must be non-blank."""

    document_format: str
    type: str
    product_document: str
    signature: str

    def __post_init__(self) -> None:
        require_non_blank(self.document_format, "document_format")
        require_non_blank(self.type, "type")
        require_non_blank(self.product_document, "product_document")
        require_non_blank(self.signature, "signature")

    @classmethod
    def introduce_goods(cls, product_document: str, signature: str) -> "CreateDocumentEnvelope":
        """Build the envelope for a manually prepared introduce-goods document."""
        return cls(
            document_format=DOCUMENT_FORMAT_MANUAL,
            type=DOCUMENT_TYPE_INTRODUCE_GOODS,
            product_document=product_document,
            signature=signature,
        )

    def to_payload(self) -> Dict[str, str]:
        """Return the wire representation in field order."""
        return {
            "document_format": self.document_format,
            "type": self.type,
            "product_document": self.product_document,
            "signature": self.signature,
        }
