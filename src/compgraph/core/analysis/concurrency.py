from __future__ import annotations

"""
Concurrency Primitives for the Analysis Phases.

Deadline couples the single operation deadline with a cooperative
cancellation event. TaskGroup is a counting join over a bounded
ThreadPoolExecutor: tasks may spawn further tasks, and `join()` only returns
once every task, including the dynamically spawned ones, has finished.
"""

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, List, Optional

from compgraph.domain.errors import AnalysisTimeoutError

logger = logging.getLogger(__name__)

# Upper bound between two cancellation checks of a waiting coordinator
POLL_INTERVAL = 0.1


class Deadline:
    """
    Operation-wide time budget with cooperative cancellation.

    Args:
        timeout_seconds: Total budget, or None for no deadline.
        event: Optional externally owned event; setting it cancels the run.
               It is only read, so one event may be shared across runs.
    """

    def __init__(self, timeout_seconds: Optional[float], event: Optional[threading.Event] = None) -> None:
        self._expires_at = None if timeout_seconds is None else time.monotonic() + float(timeout_seconds)
        self._external = event
        self._cancelled = threading.Event()

    def remaining(self) -> Optional[float]:
        """Seconds left before expiry, clamped at 0; None without a deadline."""
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())

    def expired(self) -> bool:
        return self._expires_at is not None and time.monotonic() >= self._expires_at

    @property
    def cancelled(self) -> bool:
        return self._is_set() or self.expired()

    def cancel(self) -> None:
        """Cancel this run only; the external event is left untouched."""
        self._cancelled.set()

    def check(self, phase: str) -> None:
        """Raise AnalysisTimeoutError if the run is cancelled or out of time."""
        if self.expired():
            self._cancelled.set()
            raise AnalysisTimeoutError(f"Deadline expired during {phase}.")
        if self._is_set():
            raise AnalysisTimeoutError(f"Analysis cancelled during {phase}.")

    def _is_set(self) -> bool:
        return self._cancelled.is_set() or (self._external is not None and self._external.is_set())


class TaskGroup:
    """
    Counting join over a shared executor.

    The pending counter is incremented before a task is handed to the
    executor and decremented by the task's done-callback, so a parent task
    that spawns children can never let the counter reach zero early.
    """

    def __init__(self, executor: ThreadPoolExecutor, deadline: Deadline) -> None:
        self._executor = executor
        self._deadline = deadline
        self._cond = threading.Condition()
        self._pending = 0
        self._failures: List[BaseException] = []

    @property
    def pending(self) -> int:
        with self._cond:
            return self._pending

    def submit(self, fn: Callable[..., Any], *args: Any) -> bool:
        """
        Schedule `fn(*args)` unless the run has been cancelled.

        Returns:
            bool: True if the task was scheduled.
        """
        with self._cond:
            if self._deadline.cancelled:
                return False
            self._pending += 1

        try:
            future = self._executor.submit(fn, *args)
        except RuntimeError:
            # Executor already shut down by a cancelled coordinator
            self._task_finished(None)
            return False

        future.add_done_callback(self._task_finished)
        return True

    def join(self) -> bool:
        """
        Block until every task has finished.

        Returns:
            bool: True on completion, False if the deadline expired or the
                  run was cancelled first.

        Raises:
            BaseException: The first unexpected exception raised by a task.
        """
        with self._cond:
            while self._pending > 0 and not self._failures:
                if self._deadline.cancelled:
                    self._deadline.cancel()
                    return False
                remaining = self._deadline.remaining()
                wait_for = POLL_INTERVAL if remaining is None else min(remaining, POLL_INTERVAL)
                self._cond.wait(timeout=wait_for)

            if self._failures:
                self._deadline.cancel()
                raise self._failures[0]
        return True

    def _task_finished(self, future: Optional[Future]) -> None:
        with self._cond:
            self._pending -= 1
            if future is not None and not future.cancelled():
                exc = future.exception()
                if exc is not None:
                    logger.error(f"Worker task failed unexpectedly: {exc!r}")
                    self._failures.append(exc)
            self._cond.notify_all()


def shutdown_executor(executor: ThreadPoolExecutor, *, cancelled: bool) -> None:
    """Shut an executor down, dropping queued tasks when the run was cancelled."""
    if cancelled:
        executor.shutdown(wait=False, cancel_futures=True)
    else:
        executor.shutdown(wait=True)
