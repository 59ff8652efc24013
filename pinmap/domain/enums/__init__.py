from pinmap.domain.enums.error_code import ErrorCode, ErrorSeverity
from pinmap.domain.enums.pin_status import PinStatus
__all__ = [
    "ErrorCode",
    "ErrorSeverity",
    "PinStatus",
]
