"""Shared response parsing helpers for sync/async transports."""

from __future__ import annotations

from typing import Protocol

from .errors import CrptProtocolError, CrptSendError, classify_send_error
from .models import SendOutcome


class JsonPayloadResponse(Protocol):
    status_code: int

    def json(self) -> object: ...


def parse_json_payload(response: JsonPayloadResponse) -> dict[str, object] | None:
    """Decode the response body; ``None`` when it is not a JSON object."""

    try:
        payload = response.json()
    except Exception:
        return None
    if not isinstance(payload, dict):
        return None
    if any(not isinstance(key, str) for key in payload):
        return None
    return payload


def evaluate_send_response(response: JsonPayloadResponse) -> SendOutcome:
    """Turn an HTTP response into an outcome, raising ``CrptSendError`` on failure."""

    http_status = getattr(response, "status_code", None)
    payload = parse_json_payload(response)
    mapped_error: CrptSendError | None = classify_send_error(payload, http_status=http_status)
    if mapped_error is not None:
        raise mapped_error
    if payload is None:
        raise CrptProtocolError(
            "response body is not a JSON object",
            http_status=http_status,
            cause="protocol",
        )
    return SendOutcome.from_payload(payload, http_status=http_status)


__all__ = [
    "parse_json_payload",
    "evaluate_send_response",
]
