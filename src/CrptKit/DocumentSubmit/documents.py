"""Source document model for the "introduce goods" (LP_INTRODUCE_GOODS) operation.

The document is serialized to JSON, Base64-encoded, and shipped in the
``product_document`` field of the create-document request.  Which fields are
mandatory depends on the product group (``pg``), so every field is optional
and unset fields are omitted from the JSON entirely.

Notes:
    - Dates are usually ``yyyy-MM-dd`` unless the product group requires otherwise.
    - ``products`` holds the line items (UIT/UITU codes and certificates).
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

__all__ = ["Description", "Product", "IntroduceGoodsDocument"]


class _DocumentModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")


class Description(_DocumentModel):
    """Participant details attached to the document."""

    participant_inn: Optional[str] = Field(default=None, alias="participantInn")


class Product(_DocumentModel):
    """A single line item being introduced into circulation."""

    certificate_document: Optional[str] = None
    certificate_document_date: Optional[str] = None
    certificate_document_number: Optional[str] = None
    owner_inn: Optional[str] = None
    producer_inn: Optional[str] = None
    production_date: Optional[str] = None
    tnved_code: Optional[str] = None
    uit_code: Optional[str] = None
    uitu_code: Optional[str] = None


class IntroduceGoodsDocument(_DocumentModel):
    """Document introducing goods produced in the Russian Federation."""

    description: Optional[Description] = None
    doc_id: Optional[str] = None
    doc_status: Optional[str] = None
    doc_type: Optional[str] = None
    import_request: Optional[bool] = Field(default=None, alias="importRequest")
    owner_inn: Optional[str] = None
    participant_inn: Optional[str] = None
    producer_inn: Optional[str] = None
    production_date: Optional[str] = None
    production_type: Optional[str] = None
    products: Optional[List[Product]] = None
    reg_date: Optional[str] = None
    reg_number: Optional[str] = None
