"""Shared helpers for sync/async client bootstrap."""

from __future__ import annotations

from .config import CrptClientConfig
from .core.errors import CrptConfigurationError
from .documents.models import Document
from .documents.serializer import serialize_document
from .documents.validators import validate_submission


def validate_client_config(config: CrptClientConfig) -> None:
    try:
        config.validate()
    except ValueError as exc:
        raise CrptConfigurationError(str(exc)) from exc


def prepare_submission(
    config: CrptClientConfig,
    document: Document,
    signature: str,
) -> str:
    """Validate (when enabled) and serialize; nothing here touches the queue."""

    if config.validation.enabled:
        validate_submission(document, signature)
    return serialize_document(document)


__all__ = [
    "validate_client_config",
    "prepare_submission",
]
