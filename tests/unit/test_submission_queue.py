from __future__ import annotations

import threading

import pytest

from crpt_api_client.core.errors import CrptDispatchClosedError, CrptSubmitTimeoutError
from crpt_api_client.core.models import RequestEnvelope
from crpt_api_client.core.submission_queue import BoundedSubmissionQueue
from tests.shared.senders import wait_until


def _envelope(body: str) -> RequestEnvelope:
    return RequestEnvelope(body=body, signature="sig")


def _start_producer(queue: BoundedSubmissionQueue, body: str, errors: list[BaseException]):
    def _run() -> None:
        try:
            queue.put(_envelope(body))
        except BaseException as exc:  # noqa: BLE001
            errors.append(exc)

    thread = threading.Thread(target=_run, daemon=True)
    thread.start()
    return thread


def test_queue_rejects_non_positive_capacity():
    with pytest.raises(ValueError):
        BoundedSubmissionQueue(0)


def test_queue_is_fifo():
    queue = BoundedSubmissionQueue(3)
    for body in ("a", "b", "c"):
        queue.put(_envelope(body))
    assert len(queue) == 3
    assert [queue.get().body for _ in range(3)] == ["a", "b", "c"]
    assert len(queue) == 0


def test_put_blocks_when_full_until_slot_frees():
    queue = BoundedSubmissionQueue(1)
    queue.put(_envelope("first"))
    errors: list[BaseException] = []
    producer = _start_producer(queue, "second", errors)

    assert wait_until(lambda: queue.waiting == 1)
    assert producer.is_alive()
    assert len(queue) == 1

    assert queue.get().body == "first"
    producer.join(2.0)
    assert not producer.is_alive()
    assert errors == []
    assert queue.get().body == "second"


def test_blocked_producers_are_admitted_in_arrival_order():
    queue = BoundedSubmissionQueue(1)
    queue.put(_envelope("head"))
    errors: list[BaseException] = []
    threads = []
    for index, body in enumerate(("p1", "p2", "p3"), start=1):
        threads.append(_start_producer(queue, body, errors))
        assert wait_until(lambda index=index: queue.waiting == index)

    received = [queue.get().body for _ in range(4)]
    for thread in threads:
        thread.join(2.0)
    assert received == ["head", "p1", "p2", "p3"]
    assert errors == []


def test_size_never_exceeds_capacity_under_contention():
    queue = BoundedSubmissionQueue(2)
    errors: list[BaseException] = []
    threads = [_start_producer(queue, f"m{i}", errors) for i in range(10)]
    seen_sizes: list[int] = []
    received: list[str] = []
    while len(received) < 10:
        seen_sizes.append(len(queue))
        received.append(queue.get().body)
    for thread in threads:
        thread.join(2.0)
    assert max(seen_sizes) <= 2
    assert sorted(received) == sorted(f"m{i}" for i in range(10))
    assert errors == []


def test_get_blocks_until_put():
    queue = BoundedSubmissionQueue(1)
    received: list[str] = []
    consumer = threading.Thread(target=lambda: received.append(queue.get().body), daemon=True)
    consumer.start()
    consumer.join(0.05)
    assert consumer.is_alive()
    queue.put(_envelope("late"))
    consumer.join(2.0)
    assert received == ["late"]


def test_put_with_timeout_raises_when_no_slot_frees():
    queue = BoundedSubmissionQueue(1)
    queue.put(_envelope("first"))
    with pytest.raises(CrptSubmitTimeoutError):
        queue.put(_envelope("second"), timeout=0.05)
    assert queue.waiting == 0
    assert [queue.get().body] == ["first"]


def test_timed_out_producer_does_not_block_the_next_one():
    queue = BoundedSubmissionQueue(1)
    queue.put(_envelope("first"))
    errors: list[BaseException] = []
    timed_out = threading.Thread(
        target=lambda: _put_catching(queue, "expired", errors, timeout=0.05),
        daemon=True,
    )
    timed_out.start()
    assert wait_until(lambda: queue.waiting == 1)
    patient = _start_producer(queue, "patient", errors)
    timed_out.join(2.0)
    assert queue.get().body == "first"
    patient.join(2.0)
    assert queue.get().body == "patient"
    assert len(errors) == 1 and isinstance(errors[0], CrptSubmitTimeoutError)


def _put_catching(queue, body, errors, *, timeout):
    try:
        queue.put(_envelope(body), timeout=timeout)
    except BaseException as exc:  # noqa: BLE001
        errors.append(exc)


def test_close_wakes_blocked_producers_and_returns_remaining():
    queue = BoundedSubmissionQueue(1)
    queue.put(_envelope("stuck"))
    errors: list[BaseException] = []
    threads = [_start_producer(queue, f"w{i}", errors) for i in range(2)]
    assert wait_until(lambda: queue.waiting == 2)

    remaining = queue.close()

    for thread in threads:
        thread.join(2.0)
        assert not thread.is_alive()
    assert [e.body for e in remaining] == ["stuck"]
    assert len(errors) == 2
    assert all(isinstance(exc, CrptDispatchClosedError) for exc in errors)


def test_close_wakes_blocked_consumer():
    queue = BoundedSubmissionQueue(1)
    errors: list[BaseException] = []

    def _consume() -> None:
        try:
            queue.get()
        except CrptDispatchClosedError as exc:
            errors.append(exc)

    consumer = threading.Thread(target=_consume, daemon=True)
    consumer.start()
    consumer.join(0.05)
    queue.close()
    consumer.join(2.0)
    assert not consumer.is_alive()
    assert len(errors) == 1


def test_put_and_get_after_close_raise_and_close_is_idempotent():
    queue = BoundedSubmissionQueue(1)
    queue.close()
    assert queue.close() == ()
    with pytest.raises(CrptDispatchClosedError):
        queue.put(_envelope("x"))
    with pytest.raises(CrptDispatchClosedError):
        queue.get()
