"""Error types and HTTP status mapping."""

from __future__ import annotations

from collections.abc import Mapping, Sequence


def _to_text(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def extract_error_message(payload: Mapping[str, object] | None) -> str | None:
    if not isinstance(payload, Mapping):
        return None
    for key in ("error_message", "message", "description"):
        text = _to_text(payload.get(key))
        if text is not None:
            return text
    return None


def extract_document_id(payload: Mapping[str, object] | None) -> str | None:
    if not isinstance(payload, Mapping):
        return None
    return _to_text(payload.get("value"))


class CrptApiError(Exception):
    """Base exception for this package."""

    def __init__(
        self,
        message: str,
        *,
        http_status: int | None = None,
        cause: str | None = None,
    ) -> None:
        super().__init__(message)
        self.http_status = http_status
        self.cause = cause


class CrptConfigurationError(CrptApiError):
    """Invalid rate limit or client configuration."""


class CrptValidationError(CrptApiError):
    """Document or signature rejected before admission."""

    def __init__(
        self,
        message: str,
        *,
        missing_fields: Sequence[str] = (),
    ) -> None:
        super().__init__(message, cause="validation")
        self.missing_fields = tuple(missing_fields)


class CrptSerializationError(CrptApiError):
    """Document could not be turned into a request body."""


class CrptDispatchClosedError(CrptApiError):
    """Raised when submitting to, or waiting on, a shut down dispatcher."""


class CrptSubmitTimeoutError(CrptApiError):
    """Bounded-wait submission expired before a queue slot freed."""


class CrptSendError(CrptApiError):
    """Outbound call for a dispatched envelope failed."""


class CrptTransportError(CrptSendError):
    """Network/transport-level failure."""


class CrptRejectedError(CrptSendError):
    """Request rejected by the API (HTTP 4xx)."""


class CrptServerError(CrptSendError):
    """Server-side failure (HTTP 5xx)."""


class CrptProtocolError(CrptSendError):
    """Response shape is not what the API promises."""


def classify_send_error(
    payload: Mapping[str, object] | None,
    *,
    http_status: int | None,
) -> CrptSendError | None:
    """Map an HTTP status and decoded body to a send error, if any."""

    message = extract_error_message(payload) or "CRPT API request failed"

    if http_status is None:
        return CrptProtocolError("response has no HTTP status")
    if 200 <= http_status < 300:
        return None
    if http_status >= 500:
        return CrptServerError(message, http_status=http_status, cause="server")
    if http_status >= 400:
        return CrptRejectedError(message, http_status=http_status, cause="rejected")
    return CrptProtocolError(
        f"unexpected HTTP status {http_status}",
        http_status=http_status,
    )


__all__ = [
    "CrptApiError",
    "CrptConfigurationError",
    "CrptValidationError",
    "CrptSerializationError",
    "CrptDispatchClosedError",
    "CrptSubmitTimeoutError",
    "CrptSendError",
    "CrptTransportError",
    "CrptRejectedError",
    "CrptServerError",
    "CrptProtocolError",
    "extract_error_message",
    "extract_document_id",
    "classify_send_error",
]
