from __future__ import annotations
from typing import Protocol


class DigestStrategy(Protocol):
    name: str
    algorithm: str

    def digest(self, content: bytes) -> str: ...
