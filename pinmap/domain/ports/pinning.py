from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Protocol, Sequence, Tuple


class PinningPort(Protocol):
    """Call contract of a Pinata-compatible pinning API."""

    def pin_file(self, file_name: str, content: bytes) -> str: ...

    def pin_files(self, parts: Sequence[Tuple[str, Path]], name: str) -> str: ...

    def pin_list(self, *, status: str, page_offset: int, page_limit: int) -> Dict[str, Any]: ...

    def test_authentication(self) -> None: ...
