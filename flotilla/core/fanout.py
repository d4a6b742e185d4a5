"""Bounded fan-out executor shared by the per-target and per-region pools.

All work items are queued before any worker starts. ``parallelism`` worker
threads drain the queue, each blocking on its own action call, and push
exactly one result per item they dequeue onto a results queue. A closer
thread waits for every worker and then posts a sentinel, so the caller can
drain results as they arrive without knowing how many workers finished.

Cancellation is cooperative: a worker checks the token only before taking
the next item. Items already being processed always complete and report.
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable, Iterable
from typing import Generic, TypeVar

from flotilla.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

_DONE = object()


def validate_parallelism(value: object, name: str = "parallelism") -> int:
    """Validate a concurrency bound supplied by the user or configuration.

    Parameters
    ----------
    value : object
        Candidate value
    name : str
        Option name used in the error message

    Returns
    -------
    int
        The validated value

    Raises
    ------
    ConfigurationError
        If the value is not an integer or is below 1
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got: {value!r}")

    if value < 1:
        raise ConfigurationError(f"{name} must be at least 1, got: {value}")

    return value


class CancellationToken:
    """One-way, idempotent stop signal shared by the workers of a run."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class BoundedFanOut(Generic[T, R]):
    """Apply one action to many items with at most ``parallelism`` in flight.

    Parameters
    ----------
    parallelism : int
        Maximum number of concurrent action calls
    name : str
        Prefix for worker thread names

    Raises
    ------
    ConfigurationError
        If ``parallelism`` is not an integer of at least 1
    """

    def __init__(self, parallelism: int, name: str = "fanout") -> None:
        self.parallelism = validate_parallelism(parallelism)
        self.name = name

    def run(
        self,
        items: Iterable[T],
        action: Callable[[T], R],
        cancel: CancellationToken | None = None,
        on_result: Callable[[R], None] | None = None,
        stop_when: Callable[[R], bool] | None = None,
        recover: Callable[[T, Exception], R] | None = None,
    ) -> list[R]:
        """Run ``action`` over ``items`` and collect the results.

        Parameters
        ----------
        items : Iterable[T]
            Work items, all queued up front
        action : Callable[[T], R]
            Blocking call applied to each item in a worker thread
        cancel : CancellationToken | None
            Token checked by workers before dequeuing; items never dequeued
            after cancellation produce no result
        on_result : Callable[[R], None] | None
            Called in the caller's thread for each result as it arrives
        stop_when : Callable[[R], bool] | None
            When it returns True for a result, ``cancel`` is triggered
        recover : Callable[[T, Exception], R] | None
            Turns an exception raised by ``action`` into a result. Without
            it the exception is re-raised in the caller once all workers
            have finished.

        Returns
        -------
        list[R]
            Results in completion order, not input order
        """
        work: queue.Queue[T] = queue.Queue()
        pending = 0
        for item in items:
            work.put(item)
            pending += 1

        if pending == 0:
            return []

        results: queue.Queue[object] = queue.Queue(maxsize=pending + 1)
        failures: list[BaseException] = []

        def worker() -> None:
            while True:
                if cancel is not None and cancel.cancelled:
                    return

                try:
                    item = work.get_nowait()
                except queue.Empty:
                    return

                try:
                    try:
                        result = action(item)
                    except Exception as e:
                        if recover is None:
                            raise
                        result = recover(item, e)

                    results.put(result)

                    if cancel is not None and stop_when is not None and stop_when(result):
                        cancel.cancel()
                except Exception as e:
                    logger.debug("Action raised for %r: %s", item, e)
                    failures.append(e)
                    return

        worker_count = min(self.parallelism, pending)
        workers = [
            threading.Thread(target=worker, name=f"{self.name}-{i}", daemon=True)
            for i in range(worker_count)
        ]

        def closer() -> None:
            for thread in workers:
                thread.join()
            results.put(_DONE)

        for thread in workers:
            thread.start()
        threading.Thread(target=closer, name=f"{self.name}-closer", daemon=True).start()

        collected: list[R] = []
        while True:
            result = results.get()
            if result is _DONE:
                break
            collected.append(result)
            if on_result is not None:
                on_result(result)

        if failures:
            raise failures[0]

        return collected
