"""Fixed-rate dispatch scheduler running as an asyncio task."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import Awaitable, Callable

from .async_submission_queue import AsyncSubmissionQueue
from .dispatch_shared import SchedulerState, log_send_failure, next_due_at
from .errors import CrptDispatchClosedError
from .models import RequestEnvelope

logger = logging.getLogger("crpt_api_client")

AsyncTickCallback = Callable[[RequestEnvelope], Awaitable[object]]


class AsyncDispatchScheduler:
    """Drains one envelope per tick, ticks spaced ``interval`` seconds apart (async)."""

    def __init__(
        self,
        queue: AsyncSubmissionQueue,
        sender: AsyncTickCallback,
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
        self._stop = asyncio.Event()
        self._task: asyncio.Task[None] | None = None

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def state(self) -> SchedulerState:
        return self._state

    def start(self) -> bool:
        # Check and set run without an await in between, so concurrent first
        # submissions on one loop cannot both get here.
        if self._state is not SchedulerState.NOT_STARTED:
            return False
        self._state = SchedulerState.RUNNING
        self._task = asyncio.get_running_loop().create_task(
            self._run(),
            name=f"crpt-{self._name}-scheduler",
        )
        logger.info(
            "scheduler started dispatcher=%s interval_seconds=%s",
            self._name,
            self._interval,
        )
        return True

    def stop(self) -> None:
        previous = self._state
        self._state = SchedulerState.STOPPED
        self._stop.set()
        if previous is SchedulerState.RUNNING:
            logger.info("scheduler stopping dispatcher=%s", self._name)

    async def join(self) -> None:
        if self._task is not None:
            await self._task

    async def _run(self) -> None:
        due = self._clock()
        while not self._stop.is_set():
            if await self._sleep_until(due):
                break
            try:
                envelope = await self._queue.get()
            except CrptDispatchClosedError:
                break
            dequeued_at = self._clock()
            logger.debug(
                "tick dispatcher=%s due=%.6f dequeued_at=%.6f",
                self._name,
                due,
                dequeued_at,
            )
            await self._dispatch(envelope)
            due = next_due_at(dequeued_at=dequeued_at, interval=self._interval)
        logger.info("scheduler stopped dispatcher=%s", self._name)

    async def _sleep_until(self, due: float) -> bool:
        while True:
            delay = due - self._clock()
            if delay <= 0:
                return False
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(self._stop.wait(), delay)
            if self._stop.is_set():
                return True

    async def _dispatch(self, envelope: RequestEnvelope) -> None:
        ok = True
        try:
            await self._sender(envelope)
        except Exception as exc:
            ok = False
            log_send_failure(self._name, envelope, exc)
        if self._on_dispatched is not None:
            self._on_dispatched(ok)


__all__ = [
    "AsyncTickCallback",
    "AsyncDispatchScheduler",
]
