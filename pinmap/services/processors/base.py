# pinmap/services/processors/base.py
from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

from pinmap.common.logging import get_logger
from pinmap.common.naming.natural_sort import sort_mapping
from pinmap.domain.dataclasses.processing import ProcessingOptions, RateLimitConfig
from pinmap.domain.enums.error_code import ErrorCode
from pinmap.domain.errors import ProcessingError, ValidationError
from pinmap.domain.ports.digest import DigestStrategy
from pinmap.domain.ports.files import FileOpsPort
from pinmap.services.filesystem.local_file_ops import LocalFileOps
from pinmap.services.mapping.orchestrator import LimiterFactory, RateLimitedMapper

logger = get_logger(__name__)


def require_path(value: Path | str | None, what: str) -> Path:
    if value is None or not str(value).strip():
        raise ValidationError(
            f"{what} is required",
            ErrorCode.VALIDATION_ERROR,
            context={"metadata": {"field": what}},
        )
    return Path(value)


class BaseFileProcessor:
    """
    Shared skeleton for the per-file processors: discover -> map -> sort -> save.
    Subclasses provide `operation` and the per-file computation.
    """

    operation = "processing"
    digest_error_code = ErrorCode.PROCESSING_FAILED
    strategy: Optional[DigestStrategy] = None
    default_rate_limit = RateLimitConfig(max_concurrent=5, min_time_ms=0)

    def __init__(
        self,
        *,
        file_ops: Optional[FileOpsPort] = None,
        rate_limit: Optional[RateLimitConfig] = None,
        limiter_factory: Optional[LimiterFactory] = None,
    ) -> None:
        self.file_ops: FileOpsPort = file_ops or LocalFileOps()
        self.rate_limit = rate_limit or self.default_rate_limit
        self._limiter_factory = limiter_factory

    def validate_options(self, options: ProcessingOptions) -> None:
        require_path(options.folder_path, "Folder path")
        require_path(options.output_path, "Output path")

    def digest_file(self, name: str, content: bytes) -> str:
        """Run the strategy over one file; failures carry the processor's error code."""
        try:
            return self.strategy.digest(content)
        except Exception as e:
            raise ProcessingError(
                f"{self.operation} failed for {name}: {e}",
                self.digest_error_code,
                context={"operation": self.operation, "file_path": name},
                cause=e,
            ) from e

    def mapper(self) -> RateLimitedMapper:
        return RateLimitedMapper(
            self.rate_limit,
            self.file_ops,
            operation=self.operation,
            limiter_factory=self._limiter_factory,
        )

    def save_mapping(self, output_path: Path | str, mapping: Dict[str, str]) -> Dict[str, str]:
        ordered = sort_mapping(mapping)
        self.file_ops.save_json(output_path, ordered)
        logger.info("%s results saved to: %s (%d entries)", self.operation, output_path, len(ordered))
        return ordered
