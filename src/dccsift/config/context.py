"""Read-only per-run context handed to every pipeline stage."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from dccsift.config.constants import (
    CONTEXT_LINES_DEFAULT,
    LOOKUP_RESULTS_MAX,
    LOOKUP_TIMEOUT_SEC_DEFAULT,
    MAX_ERRORS_DEFAULT,
)
from dccsift.config.discovery import Discovered
from dccsift.config.models import DccSiftConfig, ResponseFormat
from dccsift.core.paths import to_host


@dataclass(frozen=True)
class RunContext:
    """Everything one report needs to know about its environment.

    ``project_path`` is kept as given (either path convention);
    ``project_file`` is the host-openable form.
    """

    project_path: str
    config: str = "Debug"
    platform: str = "Win32"
    wsl_mode: bool = False
    max_errors: int = MAX_ERRORS_DEFAULT
    context_lines: int = CONTEXT_LINES_DEFAULT
    lookup_tool: Path | None = None
    lookup_format: ResponseFormat = "json"
    lookup_timeout_sec: float = LOOKUP_TIMEOUT_SEC_DEFAULT
    lookup_max_results: int = LOOKUP_RESULTS_MAX
    file_index: Path | None = None
    env_vars: Mapping[str, str] = field(default_factory=dict)
    ansi_encoding: str = "cp1252"
    output_override_dir: Path | None = None

    def __post_init__(self) -> None:
        upper = {k.upper(): v for k, v in self.env_vars.items()}
        object.__setattr__(self, "env_vars", MappingProxyType(upper))

    @property
    def project_file(self) -> Path:
        return Path(to_host(self.project_path))

    @property
    def project_dir(self) -> Path:
        return self.project_file.parent

    @property
    def project_name(self) -> str:
        return self.project_file.stem

    @classmethod
    def from_config(
        cls,
        config: DccSiftConfig,
        discovered: Discovered,
        project_path: str,
        *,
        build_config: str = "Debug",
        platform: str = "Win32",
        wsl_mode: bool | None = None,
        max_errors: int | None = None,
        context_lines: int | None = None,
        output_override_dir: Path | None = None,
    ) -> RunContext:
        """Merge loaded config, discovered inputs, and per-run overrides."""
        return cls(
            project_path=project_path,
            config=build_config,
            platform=platform,
            wsl_mode=config.paths.wsl_mode if wsl_mode is None else wsl_mode,
            max_errors=config.limits.max_errors if max_errors is None else max_errors,
            context_lines=(
                config.limits.context_lines if context_lines is None else context_lines
            ),
            lookup_tool=discovered.lookup_tool,
            lookup_format=config.lookup.response_format,
            lookup_timeout_sec=config.lookup.timeout_sec,
            lookup_max_results=config.lookup.max_results,
            file_index=discovered.file_index,
            env_vars=discovered.env_vars,
            ansi_encoding=config.paths.ansi_encoding,
            output_override_dir=output_override_dir,
        )
