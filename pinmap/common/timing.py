# pinmap/common/timing.py
from __future__ import annotations

import threading
import time
from typing import Any, Callable, Optional, TypeVar

from pinmap.common.logging import get_logger
from pinmap.domain.dataclasses.reports import BatchReport

R = TypeVar("R")

logger = get_logger(__name__)


def with_timing(operation: str, fn: Callable[[], R], **metadata: Any) -> R:
    """
    Run `fn`, log how long it took and whether it raised. Exceptions pass through.
        cid = with_timing("single-file-upload", lambda: client.pin_file(name, data), file=name)
    """
    t0 = time.perf_counter()
    try:
        result = fn()
    except Exception as e:
        logger.warning(
            "%s failed after %.1fms (%s: %s) %s",
            operation, (time.perf_counter() - t0) * 1000, type(e).__name__, e, metadata or "",
        )
        raise
    logger.debug("%s completed in %.1fms %s", operation, (time.perf_counter() - t0) * 1000, metadata or "")
    return result


class BatchTracker:
    """
    Thread-safe success/failure accounting for one batch.

    on_progress(processed, total) fires after every recorded item; the default
    handler logs every ~10% of the batch.
    """

    def __init__(
        self,
        operation: str,
        total: int,
        on_progress: Optional[Callable[[int, int], None]] = None,
    ) -> None:
        self._report = BatchReport(operation=operation, total=total)
        self._report.start()
        self._lock = threading.Lock()
        self._on_progress = on_progress or self._log_progress

    @property
    def progress_step(self) -> int:
        return max(1, self._report.total // 10)

    def _log_progress(self, processed: int, total: int) -> None:
        if processed % self.progress_step == 0 or processed == total:
            logger.info(
                "%s progress: %d/%d files completed (%d%%)",
                self._report.operation, processed, total, round(processed / total * 100) if total else 100,
            )

    def record_success(self) -> None:
        with self._lock:
            self._report.succeeded += 1
            processed = self._report.processed
        self._on_progress(processed, self._report.total)

    def record_error(self, subject: str, message: str) -> None:
        with self._lock:
            self._report.failed += 1
            self._report.add_error(subject, message)
            processed = self._report.processed
        logger.warning("%s item failed: %s (%s)", self._report.operation, subject, message)
        self._on_progress(processed, self._report.total)

    def complete(self) -> BatchReport:
        with self._lock:
            self._report.stop()
            return self._report
