from __future__ import annotations
from enum import StrEnum

class PinStatus(StrEnum):
    all = "all"
    pinned = "pinned"
    unpinned = "unpinned"
