"""Bounded blocking FIFO for envelopes awaiting dispatch."""

from __future__ import annotations

import logging
import threading
import time
from collections import deque

from .errors import CrptDispatchClosedError, CrptSubmitTimeoutError
from .models import RequestEnvelope

logger = logging.getLogger("crpt_api_client")


class BoundedSubmissionQueue:
    """Many-producer, single-consumer queue with strict FIFO admission.

    Producers that find the queue full wait in arrival order. A producer is
    admitted only when it is first in line and a slot is free, so a later
    producer can never take a slot ahead of an earlier one.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._capacity = capacity
        self._items: deque[RequestEnvelope] = deque()
        self._waiting: deque[object] = deque()
        self._lock = threading.Lock()
        self._not_empty = threading.Condition(self._lock)
        self._not_full = threading.Condition(self._lock)
        self._closed = False

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def waiting(self) -> int:
        """Producers currently parked on a full queue."""

        return len(self._waiting)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def put(self, envelope: RequestEnvelope, *, timeout: float | None = None) -> None:
        """Append ``envelope``, blocking while the queue is full."""

        with self._lock:
            self._ensure_open_locked()
            if self._waiting or len(self._items) >= self._capacity:
                self._wait_for_slot_locked(timeout)
            self._items.append(envelope)
            self._not_empty.notify()
            if len(self._items) < self._capacity:
                self._not_full.notify_all()
            logger.debug("envelope queued size=%s capacity=%s", len(self._items), self._capacity)

    def get(self) -> RequestEnvelope:
        """Remove the head envelope, blocking while the queue is empty."""

        with self._lock:
            while not self._items:
                self._ensure_open_locked()
                self._not_empty.wait()
            self._ensure_open_locked()
            envelope = self._items.popleft()
            self._not_full.notify_all()
            return envelope

    def close(self) -> tuple[RequestEnvelope, ...]:
        """Reject further use, wake every waiter and return what was left."""

        with self._lock:
            if self._closed:
                return ()
            self._closed = True
            remaining = tuple(self._items)
            self._items.clear()
            self._not_empty.notify_all()
            self._not_full.notify_all()
            return remaining

    def _wait_for_slot_locked(self, timeout: float | None) -> None:
        ticket = object()
        self._waiting.append(ticket)
        deadline = None if timeout is None else time.monotonic() + timeout
        try:
            while not self._closed and (
                self._waiting[0] is not ticket or len(self._items) >= self._capacity
            ):
                if deadline is None:
                    self._not_full.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise CrptSubmitTimeoutError(
                        f"no queue slot freed within {timeout} seconds",
                        cause="timeout",
                    )
                self._not_full.wait(remaining)
            self._ensure_open_locked()
        finally:
            self._waiting.remove(ticket)
            # The next producer in line may now be at the head.
            self._not_full.notify_all()

    def _ensure_open_locked(self) -> None:
        if self._closed:
            raise CrptDispatchClosedError("dispatcher is closed", cause="closed")


__all__ = [
    "BoundedSubmissionQueue",
]
