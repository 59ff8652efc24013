from pinmap.domain.dataclasses.processing import ProcessingOptions, RateLimitConfig
from pinmap.domain.dataclasses.reports import BaseReport, BatchReport
from pinmap.domain.dataclasses.results import FolderUploadResult, UploadResult
__all__ = [
    "ProcessingOptions",
    "RateLimitConfig",
    "BaseReport",
    "BatchReport",
    "FolderUploadResult",
    "UploadResult",
]
