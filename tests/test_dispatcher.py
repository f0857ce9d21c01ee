"""Tests for tdcrawl.dispatcher."""

from __future__ import annotations

import threading
import time

import pytest

from tdcrawl.dispatcher import Task, TaskDispatcher


def test_run_all_waits_for_every_task() -> None:
    finished: list[int] = []
    lock = threading.Lock()

    def work(index: int) -> None:
        time.sleep(0.01 * (index % 3))
        with lock:
            finished.append(index)

    with TaskDispatcher(3) as dispatcher:
        result = dispatcher.run_all(Task(f"t{i}", lambda i=i: work(i)) for i in range(10))

    assert sorted(finished) == list(range(10))
    assert result.submitted == 10
    assert result.succeeded == 10
    assert result.failures == []


def test_failing_task_does_not_cancel_siblings() -> None:
    completed: list[str] = []
    release = threading.Event()

    def slow() -> None:
        release.wait(timeout=2)
        completed.append("slow")

    def boom() -> None:
        release.set()
        raise RuntimeError("boom")

    with TaskDispatcher(2) as dispatcher:
        result = dispatcher.run_all(
            [
                Task("slow", slow),
                Task("boom", boom),
                Task("fast", lambda: completed.append("fast")),
            ]
        )

    assert sorted(completed) == ["fast", "slow"]
    assert result.submitted == 3
    assert [name for name, _ in result.failures] == ["boom"]
    assert str(result.failures[0][1]) == "boom"


def test_pool_size_bounds_concurrency() -> None:
    active = 0
    peak = 0
    lock = threading.Lock()

    def work() -> None:
        nonlocal active, peak
        with lock:
            active += 1
            peak = max(peak, active)
        time.sleep(0.02)
        with lock:
            active -= 1

    with TaskDispatcher(2) as dispatcher:
        dispatcher.run_all(Task(str(i), work) for i in range(8))

    assert 1 <= peak <= 2


def test_empty_batch_returns_immediately() -> None:
    with TaskDispatcher(1) as dispatcher:
        result = dispatcher.run_all([])

    assert result.submitted == 0
    assert result.failures == []


def test_dispatcher_rejects_non_positive_pool() -> None:
    with pytest.raises(ValueError):
        TaskDispatcher(0)
