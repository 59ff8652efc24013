# pinmap/common/naming/natural_sort.py
from __future__ import annotations

import re
import unicodedata
from typing import Dict, Iterable, List, Mapping, Tuple, TypeVar

V = TypeVar("V")

_chunk_re = re.compile(r"(\d+)")


def _fold(text: str) -> str:
    # accents and case are tie-breakers only, like a locale collator's primary strength
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def natural_key(text: str) -> Tuple:
    """
    Sort key that compares digit runs by numeric value:
      "file2.txt" < "file10.txt" < "File11.txt"

    Digit runs sort before letters (as a locale collator does); case and
    accents only break ties, lowercase first.
    """
    parts: List[Tuple[int, int, str]] = []
    # split() puts the captured digit runs at odd indexes
    for i, chunk in enumerate(_chunk_re.split(_fold(text))):
        if not chunk:
            continue
        if i % 2:
            parts.append((0, int(chunk), chunk))
        else:
            parts.append((1, 0, chunk))
    tiebreak = "".join("0" if ch.islower() else "1" for ch in text)
    return tuple(parts), tiebreak, text


def natural_sorted(items: Iterable[str]) -> List[str]:
    return sorted(items, key=natural_key)


def sort_mapping(mapping: Mapping[str, V]) -> Dict[str, V]:
    """Return a new dict with keys in natural order."""
    return {k: mapping[k] for k in natural_sorted(mapping.keys())}
