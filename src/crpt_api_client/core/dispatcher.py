"""Rate-limited dispatcher: admission queue plus paced background sender."""

from __future__ import annotations

import itertools
import threading
from collections.abc import Callable
from types import TracebackType

from ..config import RateLimitConfig
from .dispatch_shared import SchedulerState, log_undelivered, validate_rate_limit
from .errors import CrptDispatchClosedError
from .models import DispatchStats, RequestEnvelope
from .scheduler import DispatchScheduler, TickCallback
from .submission_queue import BoundedSubmissionQueue

_dispatcher_ids = itertools.count(1)


class Dispatcher:
    """Releases submitted envelopes at no more than ``request_limit`` per window.

    Each instance owns its queue and scheduler, so dispatchers with different
    limits can run side by side in one process. The scheduler starts on the
    first ``submit`` and runs until ``shutdown``.
    """

    def __init__(
        self,
        rate_limit: RateLimitConfig,
        sender: TickCallback,
        *,
        clock: Callable[[], float] | None = None,
        name: str | None = None,
    ) -> None:
        interval = validate_rate_limit(rate_limit)
        self._rate_limit = rate_limit
        self._name = name or f"dispatcher-{next(_dispatcher_ids)}"
        self._queue = BoundedSubmissionQueue(rate_limit.request_limit)
        self._stats_lock = threading.Lock()
        self._submitted = 0
        self._dispatched = 0
        self._failed = 0
        self._scheduler = DispatchScheduler(
            self._queue,
            sender,
            interval,
            name=self._name,
            clock=clock,
            on_dispatched=self._record_dispatch,
        )
        self._shutdown_lock = threading.Lock()

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
        with self._stats_lock:
            return DispatchStats(
                submitted=self._submitted,
                dispatched=self._dispatched,
                failed=self._failed,
            )

    def submit(self, body: str, signature: str, *, timeout: float | None = None) -> None:
        """Queue one request; blocks while ``request_limit`` requests are pending.

        Returns once the envelope is queued, not once it is sent. Raises
        ``CrptSubmitTimeoutError`` when ``timeout`` expires first and
        ``CrptDispatchClosedError`` if the dispatcher is or gets shut down.
        """

        if self._queue.closed:
            raise CrptDispatchClosedError("dispatcher is closed", cause="closed")
        envelope = RequestEnvelope(body=body, signature=signature)
        self._scheduler.start()
        # Counted before the consumer can see it, so submitted >= dispatched.
        with self._stats_lock:
            self._submitted += 1
        try:
            self._queue.put(envelope, timeout=timeout)
        except BaseException:
            with self._stats_lock:
                self._submitted -= 1
            raise

    def shutdown(self, *, wait: bool = True) -> tuple[RequestEnvelope, ...]:
        """Stop dispatching and return the envelopes that were never sent.

        Producers blocked in ``submit`` get ``CrptDispatchClosedError``. The
        in-flight tick, if any, completes; ``wait`` blocks until it has.
        """

        with self._shutdown_lock:
            self._scheduler.stop()
            undelivered = self._queue.close()
        log_undelivered(self._name, undelivered)
        if wait:
            self._scheduler.join()
        return undelivered

    def _record_dispatch(self, ok: bool) -> None:
        with self._stats_lock:
            self._dispatched += 1
            if not ok:
                self._failed += 1

    def __enter__(self) -> "Dispatcher":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        self.shutdown()
        return False


__all__ = [
    "Dispatcher",
]
