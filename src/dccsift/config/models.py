"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (DCCSIFT__SECTION__KEY)
3. Project YAML (<project dir>/.dccsift/config.yaml)
4. Global YAML (~/.config/dccsift/config.yaml)
5. Built-in defaults (this file)

Examples:
    DCCSIFT__LOGGING__LEVEL=DEBUG
    DCCSIFT__LOOKUP__TOOL_PATH=W:\\tools\\delphi-lookup.exe
    DCCSIFT__PATHS__WSL_MODE=true
    DCCSIFT__LIMITS__MAX_ERRORS=10
"""

import codecs
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from dccsift.config.constants import (
    CONTEXT_LINES_DEFAULT,
    LOOKUP_RESULTS_MAX,
    LOOKUP_TIMEOUT_SEC_DEFAULT,
    MAX_ERRORS_DEFAULT,
)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
ResponseFormat = Literal["json", "text"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        DCCSIFT__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. Logs go to stderr so the JSON report on stdout stays clean.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class LookupConfig(BaseModel):
    """External symbol lookup tool.

    Env vars:
        DCCSIFT__LOOKUP__TOOL_PATH: Lookup executable
        DCCSIFT__LOOKUP__RESPONSE_FORMAT: json (current tool) or text (older releases)
        DCCSIFT__LOOKUP__TIMEOUT_SEC: Per-symbol timeout
    """

    tool_path: str | None = Field(
        default=None,
        description="Path to the lookup executable. Unset disables symbol lookups.",
    )
    response_format: ResponseFormat = Field(
        default="json",
        description="Response shape the installed tool emits. 'json' passes --json.",
    )
    timeout_sec: float = Field(
        default=LOOKUP_TIMEOUT_SEC_DEFAULT,
        description="Hard timeout per symbol; the process is killed afterwards.",
    )
    max_results: int = Field(
        default=LOOKUP_RESULTS_MAX,
        description="Results requested from the tool (-n).",
    )

    @field_validator("timeout_sec")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"Timeout must be positive, got {v}")
        return v

    @field_validator("max_results")
    @classmethod
    def validate_max_results(cls, v: int) -> int:
        if not (1 <= v <= LOOKUP_RESULTS_MAX):
            raise ValueError(f"max_results must be 1-{LOOKUP_RESULTS_MAX}, got {v}")
        return v


class PathsConfig(BaseModel):
    """File locations and path conventions.

    Env vars:
        DCCSIFT__PATHS__FILE_INDEX_PATH: Flat file index (one path per line)
        DCCSIFT__PATHS__ENVIRONMENT_PROJ_PATH: IDE environment.proj
        DCCSIFT__PATHS__BDS_VERSION: IDE version used to locate environment.proj
        DCCSIFT__PATHS__WSL_MODE: Report /mnt/<drive>/ paths
    """

    file_index_path: str | None = Field(
        default=None,
        description="File index. Unset: <drive root>\\.public\\.file-index.txt if present.",
    )
    environment_proj_path: str | None = Field(
        default=None,
        description="environment.proj holding IDE-defined $(Name) variables.",
    )
    bds_version: str | None = Field(
        default=None,
        description="IDE version (e.g. 23.0) used to find environment.proj under %APPDATA%.",
    )
    wsl_mode: bool = Field(
        default=False,
        description="Emit /mnt/<drive>/ paths instead of Windows drive paths.",
    )
    ansi_encoding: str = Field(
        default="cp1252",
        description="Single-byte fallback for source files that are not valid UTF-8.",
    )

    @field_validator("ansi_encoding")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        try:
            codecs.lookup(v)
        except LookupError as e:
            raise ValueError(f"Unknown encoding: {v}") from e
        return v


class LimitsConfig(BaseModel):
    """Issue collection limits.

    Env vars:
        DCCSIFT__LIMITS__MAX_ERRORS: Errors stored before truncation
        DCCSIFT__LIMITS__CONTEXT_LINES: Source lines around each issue
    """

    max_errors: int = Field(
        default=MAX_ERRORS_DEFAULT,
        description="Errors stored before truncation. Later errors are usually cascades.",
    )
    context_lines: int = Field(
        default=CONTEXT_LINES_DEFAULT,
        description="Source lines shown before and after each issue.",
    )

    @field_validator("max_errors", "context_lines")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"Must be >= 0, got {v}")
        return v


class DccSiftConfig(BaseModel):
    """Root configuration for dccsift."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    lookup: LookupConfig = Field(default_factory=LookupConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    limits: LimitsConfig = Field(default_factory=LimitsConfig)
