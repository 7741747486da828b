from __future__ import annotations

"""
Unit tests for the Concurrency Primitives.

Verifies that the counting join waits for dynamically spawned tasks, that
the deadline stops the join and further submissions, and that unexpected
task failures surface on the coordinating thread. A caller-owned cancel
event is read but never set.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from compgraph.core.analysis.concurrency import Deadline, TaskGroup, shutdown_executor
from compgraph.domain.errors import AnalysisTimeoutError


# -----------------------------------------------------------------------------
# DEADLINE
# -----------------------------------------------------------------------------

def test_deadline_without_timeout_never_expires() -> None:
    deadline = Deadline(None)
    assert deadline.remaining() is None
    assert not deadline.expired()
    deadline.check("discovery")


def test_deadline_expiry_raises_on_check() -> None:
    deadline = Deadline(0.01)
    time.sleep(0.05)
    assert deadline.remaining() == 0.0
    with pytest.raises(AnalysisTimeoutError, match="Deadline expired during discovery"):
        deadline.check("discovery")
    assert deadline.cancelled


def test_external_event_cancels_run() -> None:
    event = threading.Event()
    deadline = Deadline(30.0, event)
    event.set()
    assert deadline.cancelled
    with pytest.raises(AnalysisTimeoutError, match="cancelled during usage scan"):
        deadline.check("usage scan")


def test_shared_event_is_only_read() -> None:
    """Expiry and cancel() stay local; a later run sharing the event is unaffected."""
    event = threading.Event()
    expired = Deadline(0.01, event)
    time.sleep(0.05)
    with pytest.raises(AnalysisTimeoutError):
        expired.check("discovery")
    cancelled = Deadline(30.0, event)
    cancelled.cancel()

    assert expired.cancelled and cancelled.cancelled
    assert not event.is_set()
    fresh = Deadline(30.0, event)
    assert not fresh.cancelled
    fresh.check("discovery")


def test_timeout_error_is_a_builtin_timeout() -> None:
    assert issubclass(AnalysisTimeoutError, TimeoutError)


# -----------------------------------------------------------------------------
# TASK GROUP
# -----------------------------------------------------------------------------

def test_join_waits_for_nested_tasks() -> None:
    """Children submitted by running tasks are awaited before join returns."""
    executor = ThreadPoolExecutor(max_workers=2)
    group = TaskGroup(executor, Deadline(5.0))
    seen = []
    lock = threading.Lock()

    def task(depth: int) -> None:
        time.sleep(0.01)
        with lock:
            seen.append(depth)
        if depth < 3:
            group.submit(task, depth + 1)
            group.submit(task, depth + 1)

    group.submit(task, 0)
    try:
        assert group.join() is True
    finally:
        shutdown_executor(executor, cancelled=False)

    # 1 + 2 + 4 + 8 tasks
    assert len(seen) == 15
    assert group.pending == 0


def test_join_returns_false_on_deadline() -> None:
    executor = ThreadPoolExecutor(max_workers=1)
    deadline = Deadline(0.05)
    group = TaskGroup(executor, deadline)
    release = threading.Event()

    group.submit(release.wait, 2.0)
    try:
        assert group.join() is False
        assert deadline.cancelled
    finally:
        release.set()
        shutdown_executor(executor, cancelled=True)


def test_submit_refused_after_cancellation() -> None:
    executor = ThreadPoolExecutor(max_workers=1)
    deadline = Deadline(5.0)
    group = TaskGroup(executor, deadline)
    deadline.cancel()
    try:
        assert group.submit(lambda: None) is False
        assert group.pending == 0
    finally:
        shutdown_executor(executor, cancelled=True)


def test_unexpected_task_failure_is_reraised() -> None:
    executor = ThreadPoolExecutor(max_workers=2)
    deadline = Deadline(5.0)
    group = TaskGroup(executor, deadline)

    def boom() -> None:
        raise ValueError("worker bug")

    group.submit(boom)
    try:
        with pytest.raises(ValueError, match="worker bug"):
            group.join()
        assert deadline.cancelled
    finally:
        shutdown_executor(executor, cancelled=True)


def test_join_leaves_caller_event_unset() -> None:
    event = threading.Event()
    executor = ThreadPoolExecutor(max_workers=1)
    deadline = Deadline(0.05, event)
    group = TaskGroup(executor, deadline)
    release = threading.Event()

    group.submit(release.wait, 2.0)
    try:
        assert group.join() is False
    finally:
        release.set()
        shutdown_executor(executor, cancelled=True)

    assert deadline.cancelled
    assert not event.is_set()
