"""dccsift error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Project
- 9xxx: Internal

Only the CLI boundary raises these. The build result pipeline itself never
raises: every failure there degrades to an empty or hinted field.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Project (3xxx)
    PROJECT_NOT_FOUND = 3001
    PROJECT_INVALID = 3002

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class DccSiftError(Exception):
    """Base error with structured context for JSON reports."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(DccSiftError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class ProjectError(DccSiftError):
    """Project file errors detected before the pipeline runs."""

    @classmethod
    def not_found(cls, path: str) -> "ProjectError":
        return cls(
            code=ErrorCode.PROJECT_NOT_FOUND,
            message=f"Project file not found: {path}",
            details={"path": path},
        )

    @classmethod
    def invalid(cls, path: str, reason: str) -> "ProjectError":
        return cls(
            code=ErrorCode.PROJECT_INVALID,
            message=f"Invalid project file {path}: {reason}",
            details={"path": path, "reason": reason},
        )


class InternalError(DccSiftError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details={"reason": reason, **details},
        )
