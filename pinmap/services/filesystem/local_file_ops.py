from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, List

from pinmap.common.logging import get_logger
from pinmap.common.naming.natural_sort import natural_key
from pinmap.domain.enums.error_code import ErrorCode
from pinmap.domain.errors import FileSystemError
from pinmap.domain.ports.files import FileOpsPort

logger = get_logger(__name__)


def _walk_error(err: OSError) -> None:
    # os.walk skips unreadable subfolders unless told otherwise
    code = ErrorCode.DIRECTORY_ACCESS_DENIED if isinstance(err, PermissionError) else ErrorCode.DIRECTORY_NOT_FOUND
    raise FileSystemError(
        f"Cannot list folder: {err.filename}",
        code,
        context={"file_path": str(err.filename)},
        cause=err,
    ) from err


class LocalFileOps(FileOpsPort):
    """
    Local filesystem implementation for FileOpsPort:
    recursive discovery, whole-file reads and JSON persistence.
    """

    def list_files(self, folder: Path | str) -> List[Path]:
        """
        Every regular file under `folder`, recursively, in natural path order.
        Raises FileSystemError if the folder is missing, not a directory, or
        cannot be listed.
        """
        root = Path(folder)
        if not root.exists():
            raise FileSystemError(
                f"Folder not found: {root}",
                ErrorCode.DIRECTORY_NOT_FOUND,
                context={"file_path": str(root)},
            )
        if not root.is_dir():
            raise FileSystemError(
                f"Not a directory: {root}",
                ErrorCode.DIRECTORY_NOT_FOUND,
                context={"file_path": str(root)},
            )
        if not os.access(root, os.R_OK | os.X_OK):
            raise FileSystemError(
                f"Permission denied reading folder: {root}",
                ErrorCode.DIRECTORY_ACCESS_DENIED,
                context={"file_path": str(root)},
            )

        logger.info("Reading files from folder: %s", root)
        files: List[Path] = []
        for dirpath, _dirnames, filenames in os.walk(root, onerror=_walk_error):
            for fn in filenames:
                p = Path(dirpath) / fn
                if p.is_file():
                    files.append(p)
        files.sort(key=lambda p: natural_key(p.as_posix()))

        if not files:
            logger.warning("No files found in folder: %s", root)
        else:
            logger.info("Found %d files in %s", len(files), root)
        return files

    def read_bytes(self, path: Path | str) -> bytes:
        p = Path(path)
        try:
            return p.read_bytes()
        except FileNotFoundError as e:
            raise FileSystemError(
                f"File not found: {p}", ErrorCode.FILE_NOT_FOUND, context={"file_path": str(p)}, cause=e
            ) from e
        except PermissionError as e:
            raise FileSystemError(
                f"Permission denied: {p}", ErrorCode.FILE_ACCESS_DENIED, context={"file_path": str(p)}, cause=e
            ) from e

    def save_json(self, path: Path | str, data: Any) -> None:
        """Write `data` as 2-space indented JSON, creating parent dirs."""
        p = Path(path)
        logger.info("Saving JSON to: %s", p)
        p.parent.mkdir(parents=True, exist_ok=True)
        tmp = p.with_name(p.name + ".tmp")
        tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        # atomic on the same filesystem; readers never see half a file
        os.replace(tmp, p)

    def read_json(self, path: Path | str) -> Any:
        p = Path(path)
        logger.debug("Reading JSON from: %s", p)
        with p.open("r", encoding="utf-8") as f:
            return json.load(f)

    def file_exists(self, path: Path | str) -> bool:
        return Path(path).is_file()
