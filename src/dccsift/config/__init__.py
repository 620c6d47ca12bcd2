"""Config module exports."""

from dccsift.config.context import RunContext
from dccsift.config.discovery import Discovered, discover
from dccsift.config.loader import load_config
from dccsift.config.models import (
    DccSiftConfig,
    LimitsConfig,
    LoggingConfig,
    LookupConfig,
    PathsConfig,
)

__all__ = [
    "load_config",
    "discover",
    "Discovered",
    "DccSiftConfig",
    "LimitsConfig",
    "LoggingConfig",
    "LookupConfig",
    "PathsConfig",
    "RunContext",
]
