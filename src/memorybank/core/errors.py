"""memorybank error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Analysis
- 4xxx: Sync
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2004

    # Analysis (3xxx)
    ROOT_UNREADABLE = 3001
    FILE_UNREADABLE = 3002

    # Sync (4xxx)
    PATH_OUTSIDE_ROOT = 4001
    ACTION_FAILED = 4002
    SESSION_INVALID = 4003

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class MemoryBankError(Exception):
    """Base error with structured context for tool responses."""

    code: ErrorCode
    message: str
    path: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON/MCP responses."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "path": self.path,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(MemoryBankError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            path=path,
            details={"reason": reason},
        )

    @classmethod
    def invalid_value(
        cls, field: str, value: Any, reason: str, path: str | None = None
    ) -> "ConfigError":
        where = f" in {path}" if path else ""
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}'{where}: {reason}",
            path=path,
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            path=path,
        )


class PathOutsideRootError(MemoryBankError):
    """A user- or document-supplied path escapes its root directory."""

    @classmethod
    def for_path(cls, path: str, root: str) -> "PathOutsideRootError":
        return cls(
            code=ErrorCode.PATH_OUTSIDE_ROOT,
            message=f"Path '{path}' escapes root directory",
            path=path,
            details={"root": root},
        )


@dataclass(frozen=True, slots=True)
class Failure:
    """Tagged failure carried inside a result instead of being raised.

    Used for irrecoverable conditions (e.g. the project root cannot be
    listed at all) so the caller still gets a structured response.
    """

    code: ErrorCode
    message: str
    path: str

    @classmethod
    def from_os_error(cls, code: ErrorCode, path: str, err: OSError) -> "Failure":
        reason = err.strerror or type(err).__name__
        return cls(code=code, message=f"{reason}: {path}", path=path)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "error": self.code.name,
            "message": self.message,
            "path": self.path,
        }
