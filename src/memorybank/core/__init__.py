"""Core module exports."""

from memorybank.core.errors import (
    ConfigError,
    ErrorCode,
    Failure,
    MemoryBankError,
    PathOutsideRootError,
)
from memorybank.core.logging import (
    clear_request_id,
    configure_logging,
    get_request_id,
    set_request_id,
)

__all__ = [
    # Errors
    "ConfigError",
    "ErrorCode",
    "Failure",
    "MemoryBankError",
    "PathOutsideRootError",
    # Logging
    "clear_request_id",
    "configure_logging",
    "get_request_id",
    "set_request_id",
]
