from __future__ import annotations
from enum import StrEnum


class ErrorCode(StrEnum):
    # configuration
    CONFIG_INVALID = "CONFIG_INVALID"
    CONFIG_MISSING = "CONFIG_MISSING"

    # file system
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    FILE_ACCESS_DENIED = "FILE_ACCESS_DENIED"
    DIRECTORY_NOT_FOUND = "DIRECTORY_NOT_FOUND"
    DIRECTORY_ACCESS_DENIED = "DIRECTORY_ACCESS_DENIED"

    # network
    NETWORK_TIMEOUT = "NETWORK_TIMEOUT"
    NETWORK_UNAVAILABLE = "NETWORK_UNAVAILABLE"
    API_ERROR = "API_ERROR"

    # pinata
    PINATA_AUTH_FAILED = "PINATA_AUTH_FAILED"
    PINATA_UPLOAD_FAILED = "PINATA_UPLOAD_FAILED"
    PINATA_RATE_LIMITED = "PINATA_RATE_LIMITED"

    # processing
    VALIDATION_ERROR = "VALIDATION_ERROR"
    PROCESSING_FAILED = "PROCESSING_FAILED"
    HASH_CALCULATION_FAILED = "HASH_CALCULATION_FAILED"
    CID_CALCULATION_FAILED = "CID_CALCULATION_FAILED"

    # system
    INSUFFICIENT_MEMORY = "INSUFFICIENT_MEMORY"
    DISK_FULL = "DISK_FULL"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class ErrorSeverity(StrEnum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"
