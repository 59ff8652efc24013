# pinmap/services/processors/file_upload_processor.py
from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from pinmap.common.logging import get_logger
from pinmap.common.retry import normalize_error
from pinmap.common.timing import BatchTracker, with_timing
from pinmap.domain.dataclasses.processing import ProcessingOptions, RateLimitConfig
from pinmap.domain.dataclasses.results import UploadResult
from pinmap.services.pinata.service import PinataService
from pinmap.services.processors.base import BaseFileProcessor

logger = get_logger(__name__)

DEFAULT_EXISTING_CIDS_PATH = Path("./output/downloaded-cids.json")


class FileUploadProcessor(BaseFileProcessor):
    """
    Upload each file of a folder to Pinata, one request per file.

    Files already present in the existing-CID cache (a previous `download`
    output) are skipped without a network call. A failing upload becomes a
    failed UploadResult; the rest of the batch keeps going. Only successful
    uploads are written to the output mapping.
    """

    operation = "upload"
    # ~180 requests/minute ceiling on Pinata's side
    default_rate_limit = RateLimitConfig(max_concurrent=1, min_time_ms=3000)

    def __init__(
        self,
        service: PinataService,
        *,
        existing_cids_path: Path | str = DEFAULT_EXISTING_CIDS_PATH,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.service = service
        self.existing_cids_path = Path(existing_cids_path)

    def load_existing_cids(self) -> Dict[str, str]:
        try:
            data = self.file_ops.read_json(self.existing_cids_path)
        except (OSError, ValueError):
            logger.warning("No existing CID mappings found at %s, starting fresh", self.existing_cids_path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Existing CID mappings at %s are not an object, ignoring", self.existing_cids_path)
            return {}
        logger.info("Loaded %d existing CID mappings from %s", len(data), self.existing_cids_path)
        return {str(k): str(v) for k, v in data.items() if v}

    def _upload_one(
        self, path: Path | str, name: str, existing: Dict[str, str], tracker: BatchTracker
    ) -> UploadResult:
        exists, cid = self.service.check_file_exists(name, existing)
        if exists:
            logger.info("File already exists, skipping upload: %s (%s)", name, cid)
            tracker.record_success()
            return UploadResult.from_cache(name, cid)

        try:
            content = self.file_ops.read_bytes(path)
            cid = with_timing(
                "single-file-upload",
                lambda: self.service.upload_file(name, content),
                file_name=name,
                size=len(content),
            )
        except Exception as e:
            err = normalize_error(e, "file-upload")
            logger.error("Upload failed for %s [%s]: %s", name, err.code, err.message)
            tracker.record_error(name, err.message)
            return UploadResult.failed(name, err.message)

        logger.info("Uploaded %s: %s", name, cid)
        tracker.record_success()
        return UploadResult.uploaded(name, cid)

    def process(self, options: ProcessingOptions) -> List[UploadResult]:
        self.validate_options(options)
        logger.info("Starting file upload for folder: %s", options.folder_path)

        existing = self.load_existing_cids()
        files = self.file_ops.list_files(options.folder_path)
        if not files:
            logger.warning("No files found in folder: %s", options.folder_path)
            return []

        logger.info("Starting upload of %d files", len(files))
        tracker = BatchTracker("batch-file-upload", len(files))
        by_name = self.mapper().map_paths(
            files,
            lambda path, name: self._upload_one(path, name, existing, tracker),
            before=lambda name: logger.debug("%s upload queued", name),
            after=lambda name, result: None,
        )
        report = tracker.complete()
        results = list(by_name.values())

        self.save_mapping(
            options.output_path,
            {r.file_name: r.cid for r in results if r.success and r.cid},
        )
        logger.info(
            "File upload completed: %d total, %d succeeded (%d cached), %d failed in %.1fs",
            report.total,
            report.succeeded,
            sum(1 for r in results if r.cached),
            report.failed,
            report.duration_sec,
        )
        return results
