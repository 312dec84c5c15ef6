"""Rate-limited dispatcher (async)."""

from __future__ import annotations

import itertools
from collections.abc import Callable
from types import TracebackType

from ..config import RateLimitConfig
from .async_scheduler import AsyncDispatchScheduler, AsyncTickCallback
from .async_submission_queue import AsyncSubmissionQueue
from .dispatch_shared import SchedulerState, log_undelivered, validate_rate_limit
from .errors import CrptDispatchClosedError
from .models import DispatchStats, RequestEnvelope

_dispatcher_ids = itertools.count(1)


class AsyncDispatcher:
    """Releases submitted envelopes at no more than ``request_limit`` per window (async).

    Must be used from a single event loop.
    """

    def __init__(
        self,
        rate_limit: RateLimitConfig,
        sender: AsyncTickCallback,
        *,
        clock: Callable[[], float] | None = None,
        name: str | None = None,
    ) -> None:
        interval = validate_rate_limit(rate_limit)
        self._rate_limit = rate_limit
        self._name = name or f"async-dispatcher-{next(_dispatcher_ids)}"
        self._queue = AsyncSubmissionQueue(rate_limit.request_limit)
        self._stats = DispatchStats()
        self._scheduler = AsyncDispatchScheduler(
            self._queue,
            sender,
            interval,
            name=self._name,
            clock=clock,
            on_dispatched=self._record_dispatch,
        )

    @property
    def rate_limit(self) -> RateLimitConfig:
        return self._rate_limit

    @property
    def interval(self) -> float:
        return self._scheduler.interval

    @property
    def capacity(self) -> int:
        return self._queue.capacity

    @property
    def pending(self) -> int:
        return len(self._queue)

    @property
    def waiting_producers(self) -> int:
        return self._queue.waiting

    @property
    def state(self) -> SchedulerState:
        return self._scheduler.state

    @property
    def closed(self) -> bool:
        return self._queue.closed

    def stats(self) -> DispatchStats:
        return self._stats

    async def submit(self, body: str, signature: str, *, timeout: float | None = None) -> None:
        if self._queue.closed:
            raise CrptDispatchClosedError("dispatcher is closed", cause="closed")
        envelope = RequestEnvelope(body=body, signature=signature)
        self._scheduler.start()
        # Counted before the consumer can see it, so submitted >= dispatched.
        self._adjust_submitted(1)
        try:
            await self._queue.put(envelope, timeout=timeout)
        except BaseException:
            self._adjust_submitted(-1)
            raise

    async def shutdown(self, *, wait: bool = True) -> tuple[RequestEnvelope, ...]:
        self._scheduler.stop()
        undelivered = await self._queue.close()
        log_undelivered(self._name, undelivered)
        if wait:
            await self._scheduler.join()
        return undelivered

    def _adjust_submitted(self, delta: int) -> None:
        self._stats = DispatchStats(
            submitted=self._stats.submitted + delta,
            dispatched=self._stats.dispatched,
            failed=self._stats.failed,
        )

    def _record_dispatch(self, ok: bool) -> None:
        self._stats = DispatchStats(
            submitted=self._stats.submitted,
            dispatched=self._stats.dispatched + 1,
            failed=self._stats.failed + (0 if ok else 1),
        )

    async def __aenter__(self) -> "AsyncDispatcher":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        await self.shutdown()
        return False


__all__ = [
    "AsyncDispatcher",
]
