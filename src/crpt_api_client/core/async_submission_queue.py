"""Bounded FIFO for envelopes awaiting dispatch (async)."""

from __future__ import annotations

import asyncio
import logging
from collections import deque

from .errors import CrptDispatchClosedError, CrptSubmitTimeoutError
from .models import RequestEnvelope

logger = logging.getLogger("crpt_api_client")


class AsyncSubmissionQueue:
    """Many-task, single-consumer queue with strict FIFO admission (async)."""

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._capacity = capacity
        self._items: deque[RequestEnvelope] = deque()
        self._waiting: deque[object] = deque()
        self._condition = asyncio.Condition()
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
        return len(self._items)

    async def put(self, envelope: RequestEnvelope, *, timeout: float | None = None) -> None:
        async with self._condition:
            self._ensure_open()
            if self._waiting or len(self._items) >= self._capacity:
                await self._wait_for_slot(timeout)
            self._items.append(envelope)
            self._condition.notify_all()
            logger.debug("envelope queued size=%s capacity=%s", len(self._items), self._capacity)

    async def get(self) -> RequestEnvelope:
        async with self._condition:
            await self._condition.wait_for(lambda: self._closed or bool(self._items))
            self._ensure_open()
            envelope = self._items.popleft()
            self._condition.notify_all()
            return envelope

    async def close(self) -> tuple[RequestEnvelope, ...]:
        async with self._condition:
            if self._closed:
                return ()
            self._closed = True
            remaining = tuple(self._items)
            self._items.clear()
            self._condition.notify_all()
            return remaining

    async def _wait_for_slot(self, timeout: float | None) -> None:
        ticket = object()
        self._waiting.append(ticket)

        def admitted() -> bool:
            return self._closed or (
                self._waiting[0] is ticket and len(self._items) < self._capacity
            )

        try:
            if timeout is None:
                await self._condition.wait_for(admitted)
            else:
                try:
                    await asyncio.wait_for(self._condition.wait_for(admitted), timeout)
                except TimeoutError as exc:
                    raise CrptSubmitTimeoutError(
                        f"no queue slot freed within {timeout} seconds",
                        cause="timeout",
                    ) from exc
            self._ensure_open()
        finally:
            self._waiting.remove(ticket)
            self._condition.notify_all()

    def _ensure_open(self) -> None:
        if self._closed:
            raise CrptDispatchClosedError("dispatcher is closed", cause="closed")


__all__ = [
    "AsyncSubmissionQueue",
]
