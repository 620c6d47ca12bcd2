"""Read-only view of a .dproj file and the option sets it imports.

The markup is pattern-matched rather than XML-parsed: project files written by
different IDE versions are not always well-formed, and only a handful of
elements matter here.
"""

from __future__ import annotations

import ntpath
import os
import re
from collections.abc import Mapping
from pathlib import Path

import structlog

from dccsift.core.paths import to_host
from dccsift.diagnostics.context import decode_source
from dccsift.project.scoping import find_property, resolve_scoped_property
from dccsift.project.variables import resolve_env_vars, resolve_variables

log = structlog.get_logger(__name__)

_MAIN_SOURCE_RE = re.compile(r"<MainSource>([^<]+)</MainSource>")
_LIBRARY_TYPE_RE = re.compile(
    r"<Borland\.ProjectType>[^<]*Library[^<]*</Borland\.ProjectType>|<AppType>Library</AppType>"
)
_IMPORT_RE = re.compile(r'<Import\s+Project="([^"]+\.optset)"', re.IGNORECASE)
_DEPLOY_FILE_RE = re.compile(r"<DeployFile\b([^>]*)>", re.IGNORECASE)
_ATTRIBUTE_RE = re.compile(r'(\w+)="([^"]*)"')
_LIBSUFFIX_RE = re.compile(r"\{\$LIBSUFFIX\s+'?(\w+)'?\}", re.IGNORECASE)

_MAX_IMPORT_DEPTH = 8


def read_text(path: Path) -> str:
    """Best-effort read of a project-related text file; '' when unreadable."""
    try:
        return decode_source(path.read_bytes())
    except OSError as e:
        log.debug("project.unreadable", path=str(path), error=str(e))
        return ""


def _join_host(directory: Path, value: str) -> Path:
    """Resolve a (possibly Windows-style, possibly relative) path against ``directory``."""
    path = Path(to_host(value))
    if not path.is_absolute():
        path = directory / path
    return Path(os.path.normpath(path))


class ProjectFile:
    """Lazy, cached reads over one project file."""

    def __init__(self, path: Path, content: str | None = None) -> None:
        self.path = path
        self.directory = path.parent
        self.name = path.stem
        self._content = content

    @property
    def content(self) -> str:
        if self._content is None:
            self._content = read_text(self.path) if os.path.isfile(self.path) else ""
        return self._content

    @property
    def directory_var(self) -> str:
        """``$(ProjectDir)`` value: the directory with a trailing separator."""
        return str(self.directory) + os.sep

    @property
    def main_source(self) -> str:
        match = _MAIN_SOURCE_RE.search(self.content)
        return match.group(1).strip() if match else ""

    @property
    def is_package(self) -> bool:
        return self.main_source.lower().endswith(".dpk")

    @property
    def extension(self) -> str:
        """Artifact extension: .bpl for packages, .dll for libraries, else .exe."""
        if self.is_package:
            return ".bpl"
        if _LIBRARY_TYPE_RE.search(self.content):
            return ".dll"
        return ".exe"

    @property
    def output_property(self) -> str:
        return "DCC_BplOutput" if self.is_package else "DCC_ExeOutput"

    def main_source_dir(self) -> Path:
        """Directory holding the .dpr/.dpk; the project directory when unknown."""
        source = self.main_source
        if not source:
            return self.directory
        return _join_host(self.directory, ntpath.dirname(source) or ".")

    def lib_suffix(self, env_vars: Mapping[str, str]) -> str:
        """Package library suffix from ``{$LIBSUFFIX ...}``; AUTO maps to $(DELPHIVERSION)."""
        if not self.is_package:
            return ""
        dpk = _join_host(self.directory, self.main_source)
        if not os.path.isfile(dpk):
            return ""
        match = _LIBSUFFIX_RE.search(read_text(dpk))
        if match is None:
            return ""
        suffix = match.group(1)
        if suffix.upper() == "AUTO":
            suffix = resolve_env_vars("$(DELPHIVERSION)", env_vars)
            if "$(" in suffix:
                return ""
        return suffix

    def resolve(self, value: str, config: str, platform: str, env_vars: Mapping[str, str]) -> str:
        return resolve_variables(
            value,
            config=config,
            platform=platform,
            project_dir=self.directory_var,
            env_vars=env_vars,
        )

    def get_property(
        self, name: str, config: str, platform: str, env_vars: Mapping[str, str]
    ) -> str:
        """Effective raw value of ``name``: scoped groups first, then imported option sets."""
        scoped = resolve_scoped_property(self.content, name, config, platform)
        if scoped.found:
            return scoped.value
        return self._imported_property(
            self.content, self.directory, name, config, platform, env_vars, set(), 0
        )

    def _imported_property(
        self,
        content: str,
        directory: Path,
        name: str,
        config: str,
        platform: str,
        env_vars: Mapping[str, str],
        visited: set[Path],
        depth: int,
    ) -> str:
        if depth >= _MAX_IMPORT_DEPTH:
            return ""
        for match in _IMPORT_RE.finditer(content):
            optset = _join_host(directory, self.resolve(match.group(1), config, platform, env_vars))
            if optset in visited or not os.path.isfile(optset):
                continue
            visited.add(optset)
            optset_content = read_text(optset)
            value = find_property(optset_content, name)
            if not value:
                value = self._imported_property(
                    optset_content, optset.parent, name, config, platform,
                    env_vars, visited, depth + 1,
                )
            if value:
                log.debug("project.optset_property", optset=str(optset), property=name)
                return value
        return ""

    def deploy_output(self, config: str) -> str:
        """LocalName of the DeployFile marked as the project output for ``config``."""
        for match in _DEPLOY_FILE_RE.finditer(self.content):
            attrs = dict(_ATTRIBUTE_RE.findall(match.group(1)))
            if (
                attrs.get("Class", "").lower() == "projectoutput"
                and attrs.get("Configuration", "").lower() == config.lower()
                and attrs.get("LocalName")
            ):
                return attrs["LocalName"]
        return ""
