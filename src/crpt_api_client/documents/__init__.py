"""Document models, payload builder and validators."""

from .models import Document, Product
from .serializer import serialize_document
from .validators import validate_document, validate_signature, validate_submission

__all__ = [
    "Document",
    "Product",
    "serialize_document",
    "validate_document",
    "validate_signature",
    "validate_submission",
]
