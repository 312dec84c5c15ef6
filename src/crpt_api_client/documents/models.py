"""Document models for the create-document call."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date


@dataclass(slots=True, frozen=True)
class Product:
    certificate_document_date: date | None = None
    certificate_document_number: str | None = None
    production_date: date | None = None
    tnved_code: str | None = None
    uit_code: str | None = None
    uitu_code: str | None = None


@dataclass(slots=True, frozen=True)
class Document:
    description: str | None = None
    doc_id: str | None = None
    doc_status: str | None = None
    doc_type: str | None = None
    import_request: bool = False
    owner_inn: str | None = None
    participant_inn: str | None = None
    producer_inn: str | None = None
    production_date: date | None = None
    production_type: str | None = None
    reg_date: date | None = None
    reg_number: str | None = None
    products: Sequence[Product] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if isinstance(self.products, Product):
            raise TypeError("products must be a sequence of Product, not Product")
        if not isinstance(self.products, Sequence):
            raise TypeError("products must be Sequence[Product]")
        normalized: list[Product] = []
        for product in self.products:
            if not isinstance(product, Product):
                raise TypeError("products entries must be Product")
            normalized.append(product)
        object.__setattr__(self, "products", tuple(normalized))


__all__ = [
    "Product",
    "Document",
]
