# pinmap/services/processors/download_processor.py
from __future__ import annotations

from pathlib import Path
from typing import Dict

from pinmap.common.logging import get_logger
from pinmap.domain.enums.pin_status import PinStatus
from pinmap.services.pinata.service import PinataService
from pinmap.services.processors.base import BaseFileProcessor, require_path

logger = get_logger(__name__)


class DownloadProcessor(BaseFileProcessor):
    """Fetch every pin's name -> CID from Pinata and save it as the upload cache."""

    operation = "download"

    def __init__(self, service: PinataService, **kwargs) -> None:
        super().__init__(**kwargs)
        self.service = service

    def process(self, output_path: Path | str, status: PinStatus | str = PinStatus.all) -> Dict[str, str]:
        output = require_path(output_path, "Output path")
        status = PinStatus(str(status))
        logger.info("Starting CID download (status=%s)", status)

        mappings = self.service.download_cid_mappings(status)
        if not mappings:
            logger.warning("No CID mappings found")
            return {}

        result = self.save_mapping(output, mappings)
        logger.info("Download completed: %d CID mappings", len(result))
        return result
