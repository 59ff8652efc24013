# pinmap/services/processors/folder_upload_processor.py
from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

from pinmap.common.logging import get_logger
from pinmap.common.timing import with_timing
from pinmap.domain.dataclasses.processing import ProcessingOptions
from pinmap.domain.dataclasses.results import FolderUploadResult
from pinmap.domain.enums.error_code import ErrorCode
from pinmap.domain.errors import FileSystemError
from pinmap.services.pinata.service import PinataService
from pinmap.services.processors.base import BaseFileProcessor

logger = get_logger(__name__)

DEFAULT_FOLDER_NAME = "metadata"


def display_name_for(folder_path: Path | str, folder_name: Optional[str] = None) -> str:
    if folder_name and folder_name.strip():
        return folder_name.strip()
    raw = str(folder_path or "").replace("\\", "/").rstrip("/")
    if not raw:
        return DEFAULT_FOLDER_NAME
    # "." and ".." name the folder they resolve to
    return Path(raw).resolve().name or DEFAULT_FOLDER_NAME


class FolderUploadProcessor(BaseFileProcessor):
    """Pin a whole folder as one IPFS directory in a single multipart request."""

    operation = "folder upload"

    def __init__(self, service: PinataService, **kwargs) -> None:
        super().__init__(**kwargs)
        self.service = service

    def build_parts(self, folder_path: Path | str) -> List[Tuple[str, Path]]:
        """
        (part filename, path) per file. The part filename is the folder's own
        name plus the posix path relative to it, so Pinata rebuilds the tree.
        """
        root = Path(folder_path)
        prefix = root.resolve().name or DEFAULT_FOLDER_NAME
        files = self.file_ops.list_files(root)
        return [(f"{prefix}/{Path(p).relative_to(root).as_posix()}", Path(p)) for p in files]

    def process(
        self,
        options: ProcessingOptions,
        folder_name: Optional[str] = None,
        *,
        as_mapping: bool = False,
    ) -> FolderUploadResult:
        self.validate_options(options)
        name = display_name_for(options.folder_path, folder_name)
        logger.info("Starting folder upload: %s as '%s'", options.folder_path, name)

        parts = self.build_parts(options.folder_path)
        if not parts:
            raise FileSystemError(
                f"No files found in folder: {options.folder_path}",
                ErrorCode.FILE_NOT_FOUND,
                context={"operation": "folder-upload", "file_path": str(options.folder_path)},
            )

        try:
            cid = with_timing(
                "folder-upload",
                lambda: self.service.upload_folder(parts, name),
                folder=name,
                files=len(parts),
            )
        except Exception:
            logger.error("Folder upload failed: %s", name)
            raise

        result = FolderUploadResult(folder_name=name, cid=cid)
        self.file_ops.save_json(options.output_path, {name: cid} if as_mapping else cid)
        logger.info("Folder upload completed: %s -> %s (saved to %s)", name, cid, options.output_path)
        return result
