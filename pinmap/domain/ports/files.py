from __future__ import annotations
from pathlib import Path
from typing import Any, List, Protocol


class FileReaderPort(Protocol):
    def read_bytes(self, path: Path | str) -> bytes: ...


class FileOpsPort(FileReaderPort, Protocol):
    def list_files(self, folder: Path | str) -> List[Path]: ...

    def save_json(self, path: Path | str, data: Any) -> None: ...

    def read_json(self, path: Path | str) -> Any: ...
