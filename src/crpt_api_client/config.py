"""Client configuration."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

# Dispatch intervals are tracked at microsecond resolution.
MIN_DISPATCH_INTERVAL_SECONDS = 1e-6


@dataclass(slots=True, frozen=True)
class TransportConfig:
    """Transport-related settings."""

    timeout_connect_seconds: float = 5.0
    timeout_read_seconds: float = 30.0
    timeout_write_seconds: float = 30.0
    timeout_pool_seconds: float = 5.0

    def validate(self) -> None:
        for field_name in (
            "timeout_connect_seconds",
            "timeout_read_seconds",
            "timeout_write_seconds",
            "timeout_pool_seconds",
        ):
            if getattr(self, field_name) <= 0:
                raise ValueError(f"transport.{field_name} must be > 0")


@dataclass(slots=True, frozen=True)
class RateLimitConfig:
    """At most ``request_limit`` dispatches per ``window_seconds``."""

    window_seconds: float = 60.0
    request_limit: int = 20

    @property
    def interval_seconds(self) -> float:
        return self.window_seconds / self.request_limit

    def validate(self) -> None:
        if isinstance(self.request_limit, bool) or not isinstance(self.request_limit, int):
            raise ValueError("rate_limit.request_limit must be int")
        if self.request_limit < 1:
            raise ValueError("rate_limit.request_limit must be >= 1")
        if not self.window_seconds > 0:
            raise ValueError("rate_limit.window_seconds must be > 0")
        if not math.isfinite(self.window_seconds):
            raise ValueError("rate_limit.window_seconds must be finite")
        if self.interval_seconds < MIN_DISPATCH_INTERVAL_SECONDS:
            raise ValueError(
                "rate_limit.window_seconds / request_limit must be >= "
                f"{MIN_DISPATCH_INTERVAL_SECONDS} seconds"
            )


@dataclass(slots=True, frozen=True)
class ValidationConfig:
    """Pre-admission document checks."""

    enabled: bool = True

    def validate(self) -> None:
        if not isinstance(self.enabled, bool):
            raise ValueError("validation.enabled must be bool")


@dataclass(slots=True, frozen=True)
class CrptClientConfig:
    """Runtime configuration for CRPT client."""

    base_url: str = "https://ismp.crpt.ru"
    create_document_path: str = "/api/v3/lk/documents/create"
    user_agent: str = "crpt-api-client/0.1.0"

    transport: TransportConfig = field(default_factory=TransportConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)

    def validate(self) -> None:
        if not self.base_url:
            raise ValueError("base_url must not be empty")
        if not self.create_document_path:
            raise ValueError("create_document_path must not be empty")
        self.transport.validate()
        self.rate_limit.validate()
        self.validation.validate()


__all__ = [
    "MIN_DISPATCH_INTERVAL_SECONDS",
    "TransportConfig",
    "RateLimitConfig",
    "ValidationConfig",
    "CrptClientConfig",
]
