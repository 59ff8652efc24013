# pinmap/services/processors/cid_processor.py
from __future__ import annotations

from typing import Dict, Optional

from pinmap.common.logging import get_logger
from pinmap.domain.dataclasses.processing import ProcessingOptions
from pinmap.domain.enums.error_code import ErrorCode
from pinmap.domain.ports.digest import DigestStrategy
from pinmap.services.digest.cid_strategy import UnixFsCidStrategy
from pinmap.services.processors.base import BaseFileProcessor

logger = get_logger(__name__)


class CidProcessor(BaseFileProcessor):
    """IPFS CIDs computed locally; nothing is uploaded."""

    operation = "CID calculation"
    digest_error_code = ErrorCode.CID_CALCULATION_FAILED

    def __init__(self, *, strategy: Optional[DigestStrategy] = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.strategy: DigestStrategy = strategy or UnixFsCidStrategy()

    def process(self, options: ProcessingOptions) -> Dict[str, str]:
        self.validate_options(options)
        logger.info("Starting CID calculation for folder: %s", options.folder_path)

        files = self.file_ops.list_files(options.folder_path)
        if not files:
            logger.warning("No files found to process in %s", options.folder_path)
            return {}

        cids = self.mapper().map_files(files, lambda _path, name, content: self.digest_file(name, content))
        result = self.save_mapping(options.output_path, cids)
        logger.info("CID calculation completed: %d files", len(result))
        return result
