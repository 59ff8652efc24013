from __future__ import annotations

import logging
import time
import threading
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, TypeVar

from pinmap.domain.dataclasses.processing import RateLimitConfig

R = TypeVar("R")

log = logging.getLogger(__name__)


@dataclass
class LimiterStats:
    start_ts: float
    tasks_submitted: int = 0
    tasks_started: int = 0
    tasks_completed: int = 0
    tasks_failed: int = 0
    tasks_cancelled: int = 0
    peak_active: int = 0


class RateLimiter:
    """
    Bounded worker pool with dispatch pacing, for I/O- and network-bound work.

    Features
    --------
    - schedule(fn, *args, **kwargs) -> Future
    - run_all(calls) -> List[R], all-or-nothing (first failure cancels pending work)
    - At most `max_concurrent` callables run at any instant
    - With `min_time_ms`, two dispatch starts are at least that far apart
    - Stats snapshot (peak_active is handy for tests and logs)
    - Clean shutdown, context manager support

    Notes
    -----
    - Saturation queues work inside the executor; nothing is dropped.
    - Pacing is enforced on the worker thread right before the callable runs,
      so a queued task never "uses up" its slot while it is waiting.
    """

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        *,
        name: str = "limiter",
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._config = config or RateLimitConfig()
        self._name = name
        self._clock = clock
        self._sleep = sleep
        self._executor = ThreadPoolExecutor(
            max_workers=self._config.max_concurrent,
            thread_name_prefix=name,
        )
        self._stats = LimiterStats(start_ts=time.time())
        self._active = 0
        self._lock = threading.Lock()
        # serialises dispatch so min_time spacing holds across workers
        self._dispatch_lock = threading.Lock()
        self._last_dispatch: Optional[float] = None
        self._closed = False

    @property
    def config(self) -> RateLimitConfig:
        return self._config

    # -------------------------
    # Lifecycle
    # -------------------------
    def shutdown(self, wait: bool = True, cancel_futures: bool = False) -> None:
        """Shut down the executor. Safe to call multiple times."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._executor.shutdown(wait=wait, cancel_futures=cancel_futures)

    def __enter__(self) -> "RateLimiter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown(wait=True, cancel_futures=True)

    def stats(self) -> LimiterStats:
        """Return a *snapshot* of current stats."""
        with self._lock:
            return LimiterStats(**vars(self._stats))

    # -------------------------
    # Submission
    # -------------------------
    def _await_dispatch_slot(self) -> None:
        min_time = self._config.min_time_sec
        if min_time <= 0:
            return
        with self._dispatch_lock:
            now = self._clock()
            if self._last_dispatch is not None:
                wait_for = self._last_dispatch + min_time - now
                if wait_for > 0:
                    self._sleep(wait_for)
                    now = self._clock()
            self._last_dispatch = now

    def schedule(self, fn: Callable[..., R], /, *args, **kwargs) -> Future[R]:
        """
        Queue a single callable. It starts once a worker is free and the
        pacing gate allows it. Returns a Future holding the result or exception.
        """
        if self._closed:
            raise RuntimeError(f"{self._name}: schedule() after shutdown")

        def _wrapped(*a, **kw) -> R:
            self._await_dispatch_slot()
            with self._lock:
                self._stats.tasks_started += 1
                self._active += 1
                self._stats.peak_active = max(self._stats.peak_active, self._active)
            try:
                result = fn(*a, **kw)
            except BaseException:
                with self._lock:
                    self._stats.tasks_failed += 1
                raise
            else:
                with self._lock:
                    self._stats.tasks_completed += 1
                return result
            finally:
                with self._lock:
                    self._active -= 1

        with self._lock:
            self._stats.tasks_submitted += 1

        return self._executor.submit(_wrapped, *args, **kwargs)

    # -------------------------
    # Bulk helpers
    # -------------------------
    def run_all(self, calls: Iterable[Callable[[], R]]) -> List[R]:
        """
        Schedule every zero-arg callable and wait for all of them.
        Results come back in submission order.

        The first exception cancels everything that has not started yet and
        is re-raised once the running tasks settle.
        """
        futures: List[Future[R]] = [self.schedule(c) for c in calls]
        if not futures:
            return []

        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        failed = next((f for f in futures if f in done and f.exception() is not None), None)
        if failed is not None:
            cancelled = sum(1 for f in pending if f.cancel())
            with self._lock:
                self._stats.tasks_cancelled += cancelled
            if cancelled:
                log.warning("%s: batch aborted, %d pending task(s) cancelled", self._name, cancelled)
            wait(pending)
            raise failed.exception()  # type: ignore[misc]

        return [f.result() for f in futures]
