"""Payload builder: documents to JSON request bodies."""

from __future__ import annotations

import json
from datetime import date, datetime

from ..core.errors import CrptSerializationError
from .models import Document, Product

DATE_FORMAT = "%Y-%m-%d"


def format_date(value: date | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        value = value.date()
    if not isinstance(value, date):
        raise CrptSerializationError(
            f"expected date, got {value.__class__.__name__}",
            cause="serialization",
        )
    return value.strftime(DATE_FORMAT)


def product_to_payload(product: Product) -> dict[str, object]:
    return {
        "certificateDocumentDate": format_date(product.certificate_document_date),
        "certificateDocumentNumber": product.certificate_document_number,
        "productionDate": format_date(product.production_date),
        "tnvedCode": product.tnved_code,
        "uitCode": product.uit_code,
        "uituCode": product.uitu_code,
    }


def document_to_payload(document: Document) -> dict[str, object]:
    return {
        "description": document.description,
        "docId": document.doc_id,
        "docStatus": document.doc_status,
        "docType": document.doc_type,
        "importRequest": document.import_request,
        "ownerInn": document.owner_inn,
        "participantInn": document.participant_inn,
        "producerInn": document.producer_inn,
        "productionDate": format_date(document.production_date),
        "productionType": document.production_type,
        "regDate": format_date(document.reg_date),
        "regNumber": document.reg_number,
        "products": [product_to_payload(product) for product in document.products],
    }


def serialize_document(document: Document) -> str:
    """Build the JSON body for ``document``.

    Output is deterministic for equal documents. Dates are written as
    ``YYYY-MM-DD``.
    """

    if not isinstance(document, Document):
        raise CrptSerializationError(
            f"expected Document, got {document.__class__.__name__}",
            cause="serialization",
        )
    payload = document_to_payload(document)
    try:
        return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        raise CrptSerializationError(
            "document is not JSON serializable",
            cause="serialization",
        ) from exc


__all__ = [
    "DATE_FORMAT",
    "format_date",
    "product_to_payload",
    "document_to_payload",
    "serialize_document",
]
