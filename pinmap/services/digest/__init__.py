from pinmap.services.digest.cid_strategy import UnixFsCidStrategy
from pinmap.services.digest.hash_strategy import HashlibDigestStrategy
__all__ = [
    "HashlibDigestStrategy",
    "UnixFsCidStrategy",
]
