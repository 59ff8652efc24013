# pinmap/common/retry.py
from __future__ import annotations

import errno
import re
import time
from typing import Callable, Optional, TypeVar

import requests

from pinmap.common.logging import get_logger
from pinmap.domain.enums.error_code import ErrorCode
from pinmap.domain.errors import (
    FileSystemError,
    NetworkError,
    PinmapError,
    SystemFailureError,
)

R = TypeVar("R")

logger = get_logger(__name__)

_network_re = re.compile(r"ECONNREFUSED|ENOTFOUND|ETIMEDOUT|ECONNRESET|timed? ?out|network", re.IGNORECASE)


def normalize_error(error: BaseException, operation: Optional[str] = None) -> PinmapError:
    """
    Classify any exception into the application taxonomy.
    Unknown errors become SystemFailureError(UNKNOWN_ERROR) so every error that
    reaches the top level carries a code and a severity.
    """
    if isinstance(error, PinmapError):
        return error

    ctx = {"operation": operation} if operation else {}
    msg = str(error) or type(error).__name__

    # requests' exceptions are OSErrors too, so they go first
    if isinstance(error, (requests.Timeout, TimeoutError)):
        return NetworkError(msg, ErrorCode.NETWORK_TIMEOUT, context=ctx, cause=error)
    if isinstance(error, (requests.ConnectionError, ConnectionError)):
        return NetworkError(msg, ErrorCode.NETWORK_UNAVAILABLE, context=ctx, cause=error)
    if isinstance(error, requests.RequestException):
        return NetworkError(msg, ErrorCode.API_ERROR, context=ctx, retryable=False, cause=error)
    if isinstance(error, MemoryError):
        return SystemFailureError(msg, ErrorCode.INSUFFICIENT_MEMORY, context=ctx, cause=error)
    if isinstance(error, OSError):
        if error.errno == errno.ENOSPC:
            return SystemFailureError(msg, ErrorCode.DISK_FULL, context=ctx, cause=error)
        if isinstance(error, FileNotFoundError):
            code = ErrorCode.FILE_NOT_FOUND
        elif isinstance(error, PermissionError):
            code = ErrorCode.FILE_ACCESS_DENIED
        elif isinstance(error, (IsADirectoryError, NotADirectoryError)):
            code = ErrorCode.DIRECTORY_NOT_FOUND
        else:
            code = ErrorCode.FILE_ACCESS_DENIED
        if getattr(error, "filename", None):
            ctx["file_path"] = str(error.filename)
        return FileSystemError(msg, code, context=ctx, cause=error)
    if _network_re.search(msg) or _network_re.search(type(error).__name__):
        return NetworkError(msg, ErrorCode.NETWORK_UNAVAILABLE, context=ctx, cause=error)

    return SystemFailureError(msg, ErrorCode.UNKNOWN_ERROR, context=ctx, cause=error)


def with_retry(
    operation: Callable[[], R],
    name: str,
    *,
    max_attempts: int = 3,
    base_delay_ms: int = 1000,
    sleep: Callable[[float], None] = time.sleep,
) -> R:
    """
    Call `operation` until it succeeds, retrying only retryable errors.
    Delay doubles per attempt: base, 2*base, 4*base...
    Raises the last normalised error.
    """
    attempts = max(1, int(max_attempts))
    last: Optional[PinmapError] = None

    for attempt in range(1, attempts + 1):
        try:
            logger.debug("%s: attempt %d/%d", name, attempt, attempts)
            return operation()
        except Exception as e:
            last = normalize_error(e, name)
            will_retry = last.retryable and attempt < attempts
            logger.warning(
                "%s failed (attempt %d/%d, code=%s, retryable=%s)%s",
                name, attempt, attempts, last.code, last.retryable,
                "; retrying" if will_retry else "",
            )
            if not will_retry:
                break
            delay_ms = base_delay_ms * 2 ** (attempt - 1)
            logger.debug("%s: retrying in %dms", name, delay_ms)
            sleep(delay_ms / 1000.0)

    if last is None:
        raise SystemFailureError("Operation failed without captured error", context={"operation": name})
    raise last
