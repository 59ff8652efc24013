# pinmap/domain/errors.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pinmap.domain.enums.error_code import ErrorCode, ErrorSeverity


class PinmapError(Exception):
    """
    Base application error.

    Every error that reaches the CLI carries a code, a severity and an
    optional context dict (operation, file_name, file_path, metadata...).
    `retryable` tells `with_retry` whether another attempt makes sense.
    """

    default_code: ErrorCode = ErrorCode.UNKNOWN_ERROR
    default_severity: ErrorSeverity = ErrorSeverity.medium
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        *,
        severity: Optional[ErrorSeverity] = None,
        context: Optional[Dict[str, Any]] = None,
        retryable: Optional[bool] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.severity = severity or self.default_severity
        self.context: Dict[str, Any] = dict(context or {})
        self.retryable = self.default_retryable if retryable is None else retryable
        self.timestamp = datetime.now(timezone.utc).isoformat()
        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": type(self).__name__,
            "message": self.message,
            "code": str(self.code),
            "severity": str(self.severity),
            "context": self.context,
            "timestamp": self.timestamp,
            "retryable": self.retryable,
        }


class ConfigurationError(PinmapError):
    default_code = ErrorCode.CONFIG_MISSING
    default_severity = ErrorSeverity.high


class ValidationError(PinmapError):
    default_code = ErrorCode.VALIDATION_ERROR
    default_severity = ErrorSeverity.low


class FileSystemError(PinmapError):
    default_code = ErrorCode.FILE_NOT_FOUND


class NetworkError(PinmapError):
    default_code = ErrorCode.NETWORK_UNAVAILABLE
    default_retryable = True


class PinataError(PinmapError):
    default_code = ErrorCode.PINATA_UPLOAD_FAILED

    def __init__(self, message: str, code: Optional[ErrorCode] = None, **kwargs: Any) -> None:
        code = code or self.default_code
        if "retryable" not in kwargs or kwargs["retryable"] is None:
            kwargs["retryable"] = code == ErrorCode.PINATA_RATE_LIMITED
        if "severity" not in kwargs and code == ErrorCode.PINATA_AUTH_FAILED:
            kwargs["severity"] = ErrorSeverity.high
        super().__init__(message, code, **kwargs)


class ProcessingError(PinmapError):
    default_code = ErrorCode.PROCESSING_FAILED


class SystemFailureError(PinmapError):
    default_code = ErrorCode.UNKNOWN_ERROR

    def __init__(self, message: str, code: Optional[ErrorCode] = None, **kwargs: Any) -> None:
        code = code or self.default_code
        if "severity" not in kwargs and code in (ErrorCode.INSUFFICIENT_MEMORY, ErrorCode.DISK_FULL):
            kwargs["severity"] = ErrorSeverity.critical
        super().__init__(message, code, **kwargs)
