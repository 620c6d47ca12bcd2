"""Auto-discovery of the file index and the IDE environment file.

Missing optional inputs never fail a run. They are reported as config warnings
and the corresponding feature degrades to a per-issue hint.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from dccsift.config.constants import ENVIRONMENT_PROJ_TEMPLATE, FILE_INDEX_RELATIVE
from dccsift.config.models import DccSiftConfig
from dccsift.core.paths import is_windows_path, mount_to_windows, to_host

log = structlog.get_logger(__name__)

_PROPERTY_GROUP_RE = re.compile(r"<PropertyGroup>(.*?)</PropertyGroup>", re.DOTALL)
_PROPERTY_RE = re.compile(r"<(\w+)\b[^>]*>([^<]+)</\1>")


@dataclass
class Discovered:
    """Optional inputs located for one run."""

    lookup_tool: Path | None = None
    file_index: Path | None = None
    environment_proj: Path | None = None
    env_vars: dict[str, str] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)


def find_file_index(project_path: str) -> Path | None:
    """Look for the file index at the drive root of the project."""
    win_path = mount_to_windows(project_path)
    if not is_windows_path(win_path):
        return None
    candidate = Path(to_host(win_path[:3] + FILE_INDEX_RELATIVE))
    return candidate if os.path.isfile(candidate) else None


def find_environment_proj(bds_version: str) -> Path | None:
    """Locate %APPDATA%\\Embarcadero\\BDS\\<version>\\environment.proj."""
    appdata = os.environ.get("APPDATA")
    if not appdata:
        return None
    relative = ENVIRONMENT_PROJ_TEMPLATE.format(version=bds_version)
    candidate = Path(to_host(appdata.rstrip("\\/") + "\\" + relative))
    return candidate if os.path.isfile(candidate) else None


def parse_environment_proj(path: Path) -> dict[str, str]:
    """Read IDE-defined variables from environment.proj.

    Every ``<NAME ...>value</NAME>`` in the first PropertyGroup becomes an
    entry keyed by the upper-cased name. The first definition of a name wins.
    """
    try:
        content = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        log.warning("environment_proj.unreadable", path=str(path), error=str(e))
        return {}

    group = _PROPERTY_GROUP_RE.search(content)
    if group is None:
        return {}

    variables: dict[str, str] = {}
    for match in _PROPERTY_RE.finditer(group.group(1)):
        variables.setdefault(match.group(1).upper(), match.group(2))
    return variables


def _configured_file(value: str, setting: str, warnings: list[str]) -> Path:
    # Returned even when missing; lookups report the expected location
    path = Path(to_host(value))
    if not os.path.isfile(path):
        warnings.append(f"{setting} not found: {value}")
    return path


def discover(config: DccSiftConfig, project_path: str) -> Discovered:
    """Resolve optional tool/index/environment inputs for a project."""
    found = Discovered()

    if config.lookup.tool_path:
        found.lookup_tool = _configured_file(
            config.lookup.tool_path, "lookup.tool_path", found.warnings
        )

    if config.paths.file_index_path:
        found.file_index = _configured_file(
            config.paths.file_index_path, "paths.file_index_path", found.warnings
        )
    else:
        found.file_index = find_file_index(project_path)
        if found.file_index is None:
            found.warnings.append(
                f"File index not found at drive root {FILE_INDEX_RELATIVE}"
            )

    if config.paths.environment_proj_path:
        found.environment_proj = _configured_file(
            config.paths.environment_proj_path, "paths.environment_proj_path", found.warnings
        )
    elif config.paths.bds_version:
        found.environment_proj = find_environment_proj(config.paths.bds_version)

    if found.environment_proj is not None and os.path.isfile(found.environment_proj):
        found.env_vars = parse_environment_proj(found.environment_proj)
    elif not config.paths.environment_proj_path:
        found.warnings.append(
            "environment.proj not found (custom MSBuild variables unavailable)"
        )

    log.debug(
        "discovery.done",
        lookup_tool=str(found.lookup_tool) if found.lookup_tool else None,
        file_index=str(found.file_index) if found.file_index else None,
        env_vars=len(found.env_vars),
        warnings=len(found.warnings),
    )
    return found
