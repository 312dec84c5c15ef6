from __future__ import annotations

import sys
from datetime import date
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from crpt_api_client.documents.models import Document, Product  # noqa: E402


@pytest.fixture
def sample_product() -> Product:
    return Product(
        certificate_document_date=date(2024, 1, 15),
        certificate_document_number="CERT-001",
        production_date=date(2024, 1, 10),
        tnved_code="6401100000",
        uit_code="010461111111111121abc",
        uitu_code="UITU-0001",
    )


@pytest.fixture
def sample_document(sample_product: Product) -> Document:
    return Document(
        description="introduction into circulation",
        doc_id="doc-1",
        doc_status="NEW",
        doc_type="LP_INTRODUCE_GOODS",
        import_request=True,
        owner_inn="7700000000",
        participant_inn="7700000001",
        producer_inn="7700000002",
        production_date=date(2024, 1, 10),
        production_type="OWN_PRODUCTION",
        reg_date=date(2024, 2, 1),
        reg_number="REG-42",
        products=[sample_product],
    )
