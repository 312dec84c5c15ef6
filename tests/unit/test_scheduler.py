from __future__ import annotations

import threading
import time

import pytest

from crpt_api_client.core.dispatch_shared import SchedulerState
from crpt_api_client.core.models import RequestEnvelope
from crpt_api_client.core.scheduler import DispatchScheduler
from crpt_api_client.core.submission_queue import BoundedSubmissionQueue
from tests.shared.senders import RecordingSender


def _scheduler(queue, sender, interval=0.02, **kwargs) -> DispatchScheduler:
    return DispatchScheduler(queue, sender, interval, name="test", **kwargs)


def test_scheduler_rejects_non_positive_interval():
    with pytest.raises(ValueError):
        DispatchScheduler(BoundedSubmissionQueue(1), RecordingSender(), 0.0)


def test_scheduler_lifecycle_is_single_use():
    queue = BoundedSubmissionQueue(1)
    scheduler = _scheduler(queue, RecordingSender())
    assert scheduler.state is SchedulerState.NOT_STARTED

    assert scheduler.start() is True
    assert scheduler.state is SchedulerState.RUNNING
    assert scheduler.start() is False

    scheduler.stop()
    queue.close()
    scheduler.join(2.0)
    assert scheduler.state is SchedulerState.STOPPED
    assert scheduler.start() is False
    assert scheduler.state is SchedulerState.STOPPED


def test_scheduler_stopped_before_start_never_runs():
    queue = BoundedSubmissionQueue(1)
    sender = RecordingSender()
    scheduler = _scheduler(queue, sender)
    scheduler.stop()
    assert scheduler.start() is False
    scheduler.join(0.1)
    assert sender.sent == []


def test_scheduler_dispatches_one_envelope_per_tick_in_order():
    queue = BoundedSubmissionQueue(3)
    sender = RecordingSender()
    for body in ("a", "b", "c"):
        queue.put(RequestEnvelope(body=body, signature="s"))
    scheduler = _scheduler(queue, sender, interval=0.05)
    scheduler.start()
    assert sender.wait_for(3)
    scheduler.stop()
    queue.close()
    scheduler.join(2.0)

    assert sender.bodies == ["a", "b", "c"]
    gaps = [b - a for a, b in zip(sender.times, sender.times[1:])]
    assert all(gap >= 0.045 for gap in gaps)


def test_scheduler_keeps_ticking_after_sender_failure():
    outcomes: list[bool] = []
    queue = BoundedSubmissionQueue(3)
    sender = RecordingSender(fail_on=lambda envelope: envelope.body == "bad")
    for body in ("bad", "good"):
        queue.put(RequestEnvelope(body=body, signature="s"))
    scheduler = _scheduler(queue, sender, on_dispatched=outcomes.append)
    scheduler.start()
    assert sender.wait_for(2)
    scheduler.stop()
    queue.close()
    scheduler.join(2.0)

    assert sender.bodies == ["bad", "good"]
    assert outcomes == [False, True]


def test_stop_lets_in_flight_tick_finish():
    queue = BoundedSubmissionQueue(2)
    started = threading.Event()
    release = threading.Event()
    finished: list[str] = []

    def slow_sender(envelope: RequestEnvelope) -> None:
        started.set()
        release.wait(2.0)
        finished.append(envelope.body)

    queue.put(RequestEnvelope(body="in-flight", signature="s"))
    queue.put(RequestEnvelope(body="never", signature="s"))
    scheduler = _scheduler(queue, slow_sender, interval=0.01)
    scheduler.start()
    assert started.wait(2.0)

    scheduler.stop()
    remaining = queue.close()
    release.set()
    scheduler.join(2.0)

    assert finished == ["in-flight"]
    assert [e.body for e in remaining] == ["never"]


def test_overrunning_send_delays_next_tick_without_burst():
    interval = 0.05
    queue = BoundedSubmissionQueue(4)
    spans: list[tuple[str, float, float]] = []
    done = threading.Event()

    def sender(envelope: RequestEnvelope) -> None:
        started = time.monotonic()
        if envelope.body == "slow":
            time.sleep(2 * interval)
        spans.append((envelope.body, started, time.monotonic()))
        if len(spans) == 4:
            done.set()

    for body in ("slow", "b", "c", "d"):
        queue.put(RequestEnvelope(body=body, signature="s"))
    scheduler = _scheduler(queue, sender, interval=interval)
    scheduler.start()
    assert done.wait(5.0)
    scheduler.stop()
    queue.close()
    scheduler.join(2.0)

    assert [body for body, _, _ in spans] == ["slow", "b", "c", "d"]
    for (_, _, previous_end), (_, next_start, _) in zip(spans, spans[1:]):
        assert next_start >= previous_end
    starts = [started for _, started, _ in spans]
    assert starts[1] - starts[0] >= 2 * interval
    for earlier, later in zip(starts[1:], starts[2:]):
        assert later - earlier >= interval - 0.005


def test_interval_beyond_wait_limit_keeps_scheduler_alive():
    queue = BoundedSubmissionQueue(2)
    sender = RecordingSender()
    for body in ("first", "second"):
        queue.put(RequestEnvelope(body=body, signature="s"))
    scheduler = DispatchScheduler(queue, sender, threading.TIMEOUT_MAX * 4, name="long-wait")
    scheduler.start()
    assert sender.wait_for(1)
    time.sleep(0.1)

    [thread] = [t for t in threading.enumerate() if t.name == "crpt-long-wait-scheduler"]
    assert thread.is_alive()
    assert scheduler.state is SchedulerState.RUNNING
    assert sender.bodies == ["first"]

    scheduler.stop()
    queue.close()
    scheduler.join(2.0)
    assert not thread.is_alive()
