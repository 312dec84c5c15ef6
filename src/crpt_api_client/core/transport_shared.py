"""Shared helpers for sync/async transport implementations."""

from __future__ import annotations

from collections.abc import Mapping

import httpx

from ..config import CrptClientConfig
from .models import RequestEnvelope

SIGNATURE_HEADER = "signature"


def build_default_headers(config: CrptClientConfig) -> Mapping[str, str]:
    return {
        "Accept": "application/json",
        "User-Agent": config.user_agent,
    }


def build_default_timeout(config: CrptClientConfig) -> httpx.Timeout:
    return httpx.Timeout(
        connect=config.transport.timeout_connect_seconds,
        read=config.transport.timeout_read_seconds,
        write=config.transport.timeout_write_seconds,
        pool=config.transport.timeout_pool_seconds,
    )


def build_send_headers(envelope: RequestEnvelope) -> Mapping[str, str]:
    return {
        "Content-Type": "application/json",
        SIGNATURE_HEADER: envelope.signature,
    }


def normalize_base_url(config: CrptClientConfig) -> str:
    return config.base_url.rstrip("/") + "/"


def normalize_endpoint(path: str) -> str:
    return path.lstrip("/")


__all__ = [
    "SIGNATURE_HEADER",
    "build_default_headers",
    "build_default_timeout",
    "build_send_headers",
    "normalize_base_url",
    "normalize_endpoint",
]
