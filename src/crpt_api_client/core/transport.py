"""Sync HTTP transport that sends one dispatched envelope per call."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Protocol

import httpx

from ..config import CrptClientConfig
from .errors import CrptSendError, CrptTransportError
from .models import RequestEnvelope, SendOutcome
from .response_parsing import evaluate_send_response
from .transport_shared import (
    build_default_headers,
    build_default_timeout,
    build_send_headers,
    normalize_base_url,
    normalize_endpoint,
)

logger = logging.getLogger("crpt_api_client")


class SyncTransportClient(Protocol):
    def post(self, url: str, *, content: str, headers: Mapping[str, str]) -> object: ...
    def close(self) -> None: ...


class SyncTransport:
    """Synchronous transport for the CRPT create-document endpoint."""

    def __init__(
        self,
        config: CrptClientConfig,
        *,
        client: SyncTransportClient | None = None,
    ) -> None:
        self._config = config
        self._endpoint = normalize_endpoint(config.create_document_path)
        self._closed = False
        self._owns_client = client is None
        self._client = client or httpx.Client(
            base_url=normalize_base_url(config),
            headers=build_default_headers(config),
            timeout=build_default_timeout(config),
        )

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._owns_client and hasattr(self._client, "close"):
            self._client.close()

    def send(self, envelope: RequestEnvelope) -> SendOutcome:
        """POST ``envelope`` once. Failures raise ``CrptSendError``; nothing is retried."""

        if self._closed:
            raise CrptTransportError("transport is already closed", cause="closed")

        logger.debug("send start endpoint=%s body_length=%s", self._endpoint, len(envelope.body))
        try:
            response = self._client.post(
                self._endpoint,
                content=envelope.body,
                headers=build_send_headers(envelope),
            )
        except Exception as exc:
            logger.error(
                "send network error endpoint=%s error=%s",
                self._endpoint,
                exc.__class__.__name__,
            )
            raise CrptTransportError("network/transport error", cause="network") from exc

        try:
            outcome = evaluate_send_response(response)
        except CrptSendError as exc:
            logger.error(
                "send failed endpoint=%s http_status=%s error=%s",
                self._endpoint,
                exc.http_status,
                exc.__class__.__name__,
            )
            raise
        logger.info(
            "send success endpoint=%s http_status=%s document_id=%s",
            self._endpoint,
            outcome.http_status,
            outcome.document_id,
        )
        return outcome


__all__ = [
    "SyncTransport",
]
