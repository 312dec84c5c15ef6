"""Pre-admission checks for documents and signatures."""

from __future__ import annotations

from ..core.errors import CrptValidationError
from .models import Document, Product

REQUIRED_DOCUMENT_FIELDS: tuple[str, ...] = (
    "description",
    "doc_id",
    "doc_status",
    "doc_type",
    "owner_inn",
    "participant_inn",
    "producer_inn",
    "production_date",
    "production_type",
    "reg_date",
    "reg_number",
)

REQUIRED_PRODUCT_FIELDS: tuple[str, ...] = (
    "certificate_document_date",
    "certificate_document_number",
    "production_date",
    "tnved_code",
    "uit_code",
    "uitu_code",
)


def _is_missing(value: object) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and value.strip() == ""


def _missing_fields(obj: object, required: tuple[str, ...], *, prefix: str = "") -> list[str]:
    return [f"{prefix}{name}" for name in required if _is_missing(getattr(obj, name))]


def find_document_errors(document: Document) -> list[str]:
    """Return dotted names of every missing required field."""

    missing = _missing_fields(document, REQUIRED_DOCUMENT_FIELDS)
    if not document.products:
        missing.append("products")
    for index, product in enumerate(document.products):
        missing.extend(
            _missing_fields(product, REQUIRED_PRODUCT_FIELDS, prefix=f"products[{index}].")
        )
    return missing


def validate_document(document: Document) -> None:
    if not isinstance(document, Document):
        raise CrptValidationError("document is required", missing_fields=("document",))
    missing = find_document_errors(document)
    if missing:
        raise CrptValidationError(
            "document has missing required fields: " + ", ".join(missing),
            missing_fields=missing,
        )


def validate_signature(signature: str | None) -> str:
    if not isinstance(signature, str) or signature.strip() == "":
        raise CrptValidationError("signature is required", missing_fields=("signature",))
    return signature


def validate_submission(document: Document, signature: str | None) -> None:
    """Check document and signature together, reporting every problem at once."""

    missing: list[str] = []
    if isinstance(document, Document):
        missing.extend(find_document_errors(document))
    else:
        missing.append("document")
    if not isinstance(signature, str) or signature.strip() == "":
        missing.append("signature")
    if missing:
        raise CrptValidationError(
            "submission has missing required fields: " + ", ".join(missing),
            missing_fields=missing,
        )


__all__ = [
    "REQUIRED_DOCUMENT_FIELDS",
    "REQUIRED_PRODUCT_FIELDS",
    "find_document_errors",
    "validate_document",
    "validate_signature",
    "validate_submission",
]
