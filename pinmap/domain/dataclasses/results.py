# pinmap/domain/dataclasses/results.py
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class UploadResult:
    """
    Outcome of one attempted upload. Never mutated after creation.
    success=False implies an empty cid and a populated error.
    """
    file_name: str
    cid: str
    success: bool
    error: Optional[str] = None
    cached: bool = False

    @classmethod
    def uploaded(cls, file_name: str, cid: str) -> "UploadResult":
        return cls(file_name=file_name, cid=cid, success=True)

    @classmethod
    def from_cache(cls, file_name: str, cid: str) -> "UploadResult":
        return cls(file_name=file_name, cid=cid, success=True, cached=True)

    @classmethod
    def failed(cls, file_name: str, error: str) -> "UploadResult":
        return cls(file_name=file_name, cid="", success=False, error=error or "Upload failed")

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FolderUploadResult:
    folder_name: str
    cid: str
