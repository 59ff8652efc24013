# pinmap/services/processors/hash_processor.py
from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, Optional

from pinmap.common.logging import get_logger
from pinmap.common.naming.natural_sort import sort_mapping
from pinmap.domain.dataclasses.processing import ProcessingOptions
from pinmap.domain.enums.error_code import ErrorCode
from pinmap.domain.ports.digest import DigestStrategy
from pinmap.services.digest.hash_strategy import HashlibDigestStrategy
from pinmap.services.processors.base import BaseFileProcessor, require_path

logger = get_logger(__name__)


class HashProcessor(BaseFileProcessor):
    """SHA-256 (by default) of every file in a folder, keyed by file name."""

    operation = "hash"
    digest_error_code = ErrorCode.HASH_CALCULATION_FAILED

    def __init__(self, *, strategy: Optional[DigestStrategy] = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.strategy: DigestStrategy = strategy or HashlibDigestStrategy()

    def process(self, options: ProcessingOptions) -> Dict[str, str]:
        self.validate_options(options)
        logger.info("Starting file hash processing for folder: %s", options.folder_path)

        files = self.file_ops.list_files(options.folder_path)
        if not files:
            logger.warning("No files found to hash in %s", options.folder_path)
            return {}

        hashes = self.mapper().map_files(files, lambda _path, name, content: self.digest_file(name, content))
        result = self.save_mapping(options.output_path, hashes)
        logger.info("Hash processing completed: %d files", len(result))
        return result

    def hash_of_hashes(self, values: Iterable[str]) -> str:
        """Digest of the concatenated digests, no separator, UTF-8."""
        return self.strategy.digest("".join(values).encode("utf-8"))

    def process_with_final_hash(self, options: ProcessingOptions, final_output_path: Path | str) -> str:
        """
        Hash every file, then hash the hashes in file-name order and save the
        aggregate as a bare JSON string. Input order never changes the result.
        """
        require_path(final_output_path, "Final output path")
        hashes = self.process(options)
        if not hashes:
            logger.warning("No file hashes to aggregate; final hash not written")
            return ""

        final = self.hash_of_hashes(sort_mapping(hashes).values())
        self.file_ops.save_json(final_output_path, final)
        logger.info("Final hash (%d files): %s", len(hashes), final)
        return final
