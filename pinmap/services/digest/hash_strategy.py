from __future__ import annotations

import base64
import hashlib
from typing import Callable, Dict

from pinmap.domain.enums.error_code import ErrorCode
from pinmap.domain.errors import ValidationError
from pinmap.domain.ports.digest import DigestStrategy

_ENCODERS: Dict[str, Callable[[bytes], str]] = {
    "hex": lambda b: b.hex(),
    "base64": lambda b: base64.b64encode(b).decode("ascii"),
    "base64url": lambda b: base64.urlsafe_b64encode(b).decode("ascii").rstrip("="),
    "latin1": lambda b: b.decode("latin-1"),
    "binary": lambda b: b.decode("latin-1"),
}


class HashlibDigestStrategy(DigestStrategy):
    """
    Whole-buffer hashlib digest, text-encoded (default sha256/hex).
    """

    def __init__(self, algorithm: str = "sha256", encoding: str = "hex") -> None:
        algo = (algorithm or "").strip().lower()
        enc = (encoding or "").strip().lower()
        if algo not in hashlib.algorithms_available:
            raise ValidationError(
                f"Unsupported hash algorithm: {algorithm}",
                ErrorCode.VALIDATION_ERROR,
                context={"metadata": {"algorithm": algorithm}},
            )
        if enc not in _ENCODERS:
            raise ValidationError(
                f"Unsupported digest encoding: {encoding} (use one of {', '.join(sorted(_ENCODERS))})",
                ErrorCode.VALIDATION_ERROR,
                context={"metadata": {"encoding": encoding}},
            )
        self.algorithm = algo
        self.encoding = enc
        self.name = f"hashlib:{algo}:{enc}"
        self._encode = _ENCODERS[enc]

    def digest(self, content: bytes) -> str:
        h = hashlib.new(self.algorithm)
        h.update(content)
        if h.digest_size == 0:  # shake_* need an explicit length
            return self._encode(h.digest(32))  # type: ignore[call-arg]
        return self._encode(h.digest())
