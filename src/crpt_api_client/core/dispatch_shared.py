"""Shared helpers for sync/async dispatch implementations."""

from __future__ import annotations

import enum
import logging

from ..config import RateLimitConfig
from .errors import CrptConfigurationError, CrptSendError
from .models import RequestEnvelope

logger = logging.getLogger("crpt_api_client")


class SchedulerState(enum.Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    STOPPED = "stopped"


def validate_rate_limit(rate_limit: RateLimitConfig) -> float:
    """Validate ``rate_limit`` and return the dispatch interval in seconds."""

    try:
        rate_limit.validate()
    except ValueError as exc:
        raise CrptConfigurationError(str(exc)) from exc
    return rate_limit.interval_seconds


def next_due_at(*, dequeued_at: float, interval: float) -> float:
    """Return when the tick after one that dequeued at ``dequeued_at`` may fire.

    The next tick is always a full ``interval`` after the previous dequeue, so a
    slow send or an idle queue never leads to back-to-back ticks. Wake-up latency
    therefore accumulates as drift, which only ever lowers the dispatch rate.
    """

    return dequeued_at + interval


def log_send_failure(name: str, envelope: RequestEnvelope, exc: Exception) -> None:
    if isinstance(exc, CrptSendError):
        logger.error(
            "dispatch send failed dispatcher=%s http_status=%s cause=%s error=%s",
            name,
            exc.http_status,
            exc.cause,
            exc.__class__.__name__,
        )
        return
    logger.error(
        "dispatch send failed dispatcher=%s body_length=%s error=%s",
        name,
        len(envelope.body),
        exc.__class__.__name__,
        exc_info=exc,
    )


def log_undelivered(name: str, undelivered: tuple[RequestEnvelope, ...]) -> None:
    if undelivered:
        logger.warning(
            "dispatcher shut down with undelivered envelopes dispatcher=%s count=%s",
            name,
            len(undelivered),
        )


__all__ = [
    "SchedulerState",
    "validate_rate_limit",
    "next_due_at",
    "log_send_failure",
    "log_undelivered",
]
