# pinmap/common/path/names.py
from __future__ import annotations

import re
from collections import Counter
from pathlib import Path
from typing import Iterable, List

_sep_re = re.compile(r"^.*[\\/]")


def file_name_of(path: Path | str) -> str:
    """
    Last path segment, treating both '/' and '\\' as separators so
    Windows-style paths behave the same on every platform.
    Returns '' for an empty path or one ending in a separator.
    """
    s = str(path or "")
    return _sep_re.sub("", s)


def duplicate_names(paths: Iterable[Path | str]) -> List[str]:
    """Base names that occur more than once, in first-seen order."""
    counts = Counter(file_name_of(p) for p in paths)
    return [name for name, n in counts.items() if n > 1]
