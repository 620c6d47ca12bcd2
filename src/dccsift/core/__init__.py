"""Core module exports."""

from dccsift.core.errors import (
    ConfigError,
    DccSiftError,
    ErrorCode,
    InternalError,
    ProjectError,
)
from dccsift.core.logging import (
    clear_run_id,
    configure_logging,
    get_logger,
    get_run_id,
    set_run_id,
)

__all__ = [
    # Errors
    "ConfigError",
    "DccSiftError",
    "ErrorCode",
    "InternalError",
    "ProjectError",
    # Logging
    "clear_run_id",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "set_run_id",
]
