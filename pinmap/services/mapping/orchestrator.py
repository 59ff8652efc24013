# pinmap/services/mapping/orchestrator.py
from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Generic, List, Optional, Sequence, Tuple, TypeVar

from pinmap.common.concurrency.rate_limiter import RateLimiter
from pinmap.common.logging import get_logger
from pinmap.common.naming.natural_sort import sort_mapping
from pinmap.common.path.names import duplicate_names, file_name_of
from pinmap.domain.dataclasses.processing import RateLimitConfig
from pinmap.domain.enums.error_code import ErrorCode
from pinmap.domain.errors import ValidationError
from pinmap.domain.ports.files import FileReaderPort

R = TypeVar("R")

logger = get_logger(__name__)

PathLike = Path | str
ContentCompute = Callable[[PathLike, str, bytes], R]
PathCompute = Callable[[PathLike, str], R]
BeforeHook = Callable[[str], None]
AfterHook = Callable[[str, R], None]
LimiterFactory = Callable[[RateLimitConfig], RateLimiter]


class RateLimitedMapper(Generic[R]):
    """
    Runs one per-file computation over a list of paths under a rate limit
    and returns {file name: result} in natural key order.

    The computation is passed in; the mapper never knows whether it is
    hashing, computing CIDs or uploading.

    - map_files(): reads each file through `reader`, then compute(path, name, content)
    - map_paths(): compute(path, name) owns any I/O itself

    A failing computation aborts the batch (pending work is cancelled) and
    the error propagates. Callers that want per-file isolation catch inside
    their computation.
    """

    def __init__(
        self,
        config: RateLimitConfig,
        reader: FileReaderPort,
        *,
        operation: str = "processing",
        limiter_factory: Optional[LimiterFactory] = None,
    ) -> None:
        self.config = config
        self.reader = reader
        self.operation = operation
        self._limiter_factory: LimiterFactory = limiter_factory or (
            lambda cfg: RateLimiter(cfg, name=f"{operation}-")
        )

    # -------------------------
    # Hooks (defaults)
    # -------------------------
    def _log_before(self, name: str) -> None:
        logger.info("%s %s started", name, self.operation)

    def _log_after(self, name: str, result: R) -> None:
        logger.info("%s %s completed", name, self.operation)

    # -------------------------
    # Public API
    # -------------------------
    def map_files(
        self,
        paths: Sequence[PathLike],
        compute: ContentCompute[R],
        *,
        before: Optional[BeforeHook] = None,
        after: Optional[AfterHook[R]] = None,
    ) -> Dict[str, R]:
        def _with_content(path: PathLike, name: str) -> R:
            content = self.reader.read_bytes(path)
            return compute(path, name, content)

        return self.map_paths(paths, _with_content, before=before, after=after)

    def map_paths(
        self,
        paths: Sequence[PathLike],
        compute: PathCompute[R],
        *,
        before: Optional[BeforeHook] = None,
        after: Optional[AfterHook[R]] = None,
    ) -> Dict[str, R]:
        file_list: List[PathLike] = list(paths or [])
        if not file_list:
            return {}

        dups = duplicate_names(file_list)
        if dups:
            raise ValidationError(
                f"Duplicate file names in batch: {', '.join(dups)}",
                ErrorCode.VALIDATION_ERROR,
                context={"operation": self.operation, "metadata": {"duplicates": dups}},
            )

        on_before = before or self._log_before
        on_after = after or self._log_after

        def _one(path: PathLike) -> Tuple[str, R]:
            name = file_name_of(path)
            on_before(name)
            try:
                result = compute(path, name)
            except Exception:
                logger.error("Failed to process %s for file: %s", self.operation, name)
                raise
            on_after(name, result)
            return name, result

        with self._limiter_factory(self.config) as limiter:
            pairs = limiter.run_all([(lambda p=p: _one(p)) for p in file_list])

        return sort_mapping(dict(pairs))
