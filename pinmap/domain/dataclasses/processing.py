# pinmap/domain/dataclasses/processing.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class RateLimitConfig:
    """
    Concurrency/pacing policy for one batch.

    max_concurrent: how many per-file computations may run at once.
    min_time_ms:    minimum spacing between two dispatch starts (0 = none).
    """
    max_concurrent: int = 5
    min_time_ms: int = 0

    def __post_init__(self) -> None:
        if self.max_concurrent < 1:
            raise ValueError(f"max_concurrent must be >= 1 (got {self.max_concurrent})")
        if self.min_time_ms < 0:
            raise ValueError(f"min_time_ms must be >= 0 (got {self.min_time_ms})")

    @property
    def min_time_sec(self) -> float:
        return self.min_time_ms / 1000.0


@dataclass(frozen=True)
class ProcessingOptions:
    folder_path: Path | str
    output_path: Path | str
