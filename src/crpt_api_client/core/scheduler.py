"""Fixed-rate dispatch scheduler running on a background thread."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from .dispatch_shared import SchedulerState, log_send_failure, next_due_at
from .errors import CrptDispatchClosedError
from .models import RequestEnvelope
from .submission_queue import BoundedSubmissionQueue

logger = logging.getLogger("crpt_api_client")

TickCallback = Callable[[RequestEnvelope], object]


class DispatchScheduler:
    """Drains one envelope per tick, ticks spaced ``interval`` seconds apart.

    Ticks run on a single thread, so a dispatch never overlaps another one.
    The first tick fires immediately on start.
    """

    def __init__(
        self,
        queue: BoundedSubmissionQueue,
        sender: TickCallback,
        interval: float,
        *,
        name: str = "dispatcher",
        clock: Callable[[], float] | None = None,
        on_dispatched: Callable[[bool], None] | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self._queue = queue
        self._sender = sender
        self._interval = interval
        self._name = name
        self._clock = clock or time.monotonic
        self._on_dispatched = on_dispatched
        self._state = SchedulerState.NOT_STARTED
        self._state_lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def state(self) -> SchedulerState:
        return self._state

    def start(self) -> bool:
        """Start ticking. Returns ``False`` when already started or stopped."""

        with self._state_lock:
            if self._state is not SchedulerState.NOT_STARTED:
                return False
            self._state = SchedulerState.RUNNING
            self._thread = threading.Thread(
                target=self._run,
                name=f"crpt-{self._name}-scheduler",
                daemon=True,
            )
            self._thread.start()
        logger.info(
            "scheduler started dispatcher=%s interval_seconds=%s",
            self._name,
            self._interval,
        )
        return True

    def stop(self) -> None:
        """Let the in-flight tick finish and never start another one.

        A tick parked on an empty queue only wakes once the queue is closed.
        """

        with self._state_lock:
            previous = self._state
            self._state = SchedulerState.STOPPED
            self._stop.set()
        if previous is SchedulerState.RUNNING:
            logger.info("scheduler stopping dispatcher=%s", self._name)

    def join(self, timeout: float | None = None) -> None:
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _run(self) -> None:
        due = self._clock()
        while not self._stop.is_set():
            if self._sleep_until(due):
                break
            try:
                envelope = self._queue.get()
            except CrptDispatchClosedError:
                break
            dequeued_at = self._clock()
            logger.debug(
                "tick dispatcher=%s due=%.6f dequeued_at=%.6f",
                self._name,
                due,
                dequeued_at,
            )
            self._dispatch(envelope)
            due = next_due_at(dequeued_at=dequeued_at, interval=self._interval)
        logger.info("scheduler stopped dispatcher=%s", self._name)

    def _sleep_until(self, due: float) -> bool:
        """Wait until ``due``; True when stopped first."""

        while True:
            delay = due - self._clock()
            if delay <= 0:
                return False
            # Event.wait overflows above TIMEOUT_MAX; long intervals wait in chunks.
            if self._stop.wait(min(delay, threading.TIMEOUT_MAX)):
                return True

    def _dispatch(self, envelope: RequestEnvelope) -> None:
        ok = True
        try:
            self._sender(envelope)
        except Exception as exc:
            ok = False
            log_send_failure(self._name, envelope, exc)
        if self._on_dispatched is not None:
            self._on_dispatched(ok)


__all__ = [
    "TickCallback",
    "DispatchScheduler",
]
