"""Core value models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from .errors import extract_document_id


@dataclass(slots=True, frozen=True)
class RequestEnvelope:
    """Serialized body plus its signature, queued for one dispatch."""

    body: str
    signature: str = field(repr=False)


@dataclass(slots=True, frozen=True)
class SendOutcome:
    http_status: int
    document_id: str | None
    payload: Mapping[str, object] = field(default_factory=dict, repr=False)

    @classmethod
    def from_payload(cls, payload: Mapping[str, object], *, http_status: int) -> "SendOutcome":
        return cls(
            http_status=http_status,
            document_id=extract_document_id(payload),
            payload=dict(payload),
        )


@dataclass(slots=True, frozen=True)
class DispatchStats:
    submitted: int = 0
    dispatched: int = 0
    failed: int = 0

    @property
    def succeeded(self) -> int:
        return self.dispatched - self.failed


__all__ = [
    "RequestEnvelope",
    "SendOutcome",
    "DispatchStats",
]
