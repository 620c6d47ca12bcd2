"""Artifact path resolution - where did the compiled binary end up?

Two tiers:

1. The DCC command line echoed in the MSBuild output. It reflects MSBuild's
   own variable resolution, so it is authoritative when present.
2. The project file: the scoped output-directory property, imported option
   sets, the ProjectOutput deploy entry, and finally the main source folder.

A path is only ever reported if the file exists.
"""

from __future__ import annotations

import ntpath
import os
import re
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from dccsift.core.paths import normalize_for_output, to_host
from dccsift.diagnostics.context import split_source_lines
from dccsift.project.dproj import ProjectFile

if TYPE_CHECKING:
    from dccsift.config.context import RunContext

log = structlog.get_logger(__name__)

# dcc32.exe, dcc64.exe, dccosx64.exe, dccaarm64.exe, ...
_COMPILER_RE = re.compile(r"\bdcc\w*\.exe\b", re.IGNORECASE)

# Last token on the command line: the .dpr/.dpk, optionally followed by (TaskId:NN)
_SOURCE_TOKEN_RE = re.compile(
    r'(?:"([^"]+\.dp[rk])"|(\S+\.dp[rk]))\s*(?:\(TaskId:\d+\))?\s*$', re.IGNORECASE
)

OUTPUT_DIR_FLAG = "-E"
PACKAGE_OUTPUT_DIR_FLAG = "-LE"
OUTPUT_EXT_FLAG = "-TX"


def find_compiler_invocation(output: str) -> str:
    """The first output line that runs a DCC compiler executable, trimmed."""
    for raw in split_source_lines(output):
        line = raw.strip()
        if _COMPILER_RE.search(line):
            return line
    return ""


def extract_flag(command_line: str, flag: str) -> str:
    """Value of ``flag`` on a DCC command line.

    ``-E"C:\\Out Dir"`` and ``-EC:\\Out`` are both accepted. The flag must be
    preceded by a space so it never matches inside a path.
    """
    pos = command_line.find(" " + flag)
    if pos < 0:
        return ""
    start = pos + 1 + len(flag)
    if start >= len(command_line):
        return ""
    if command_line[start] == '"':
        end = command_line.find('"', start + 1)
        return command_line[start + 1 : end] if end > start + 1 else ""
    end = start
    while end < len(command_line) and not command_line[end].isspace():
        end += 1
    return command_line[start:end]


def extract_source(command_line: str) -> str:
    """The .dpr/.dpk path that ends a DCC command line, quoted or not."""
    match = _SOURCE_TOKEN_RE.search(command_line)
    if match is None:
        return ""
    return match.group(1) or match.group(2)


def output_dir_from_invocation(command_line: str, is_package: bool) -> str | None:
    """Declared output directory, else the source file's directory.

    Returns '' when the source has no directory part (DCC then writes next to
    the project) and None when the line names neither.
    """
    flag = PACKAGE_OUTPUT_DIR_FLAG if is_package else OUTPUT_DIR_FLAG
    declared = extract_flag(command_line, flag)
    if declared:
        return declared
    source = extract_source(command_line)
    if not source:
        return None
    return ntpath.dirname(source)


def _host_dir(base: Path, value: str) -> Path:
    path = Path(to_host(value)) if value else Path()
    if not path.is_absolute():
        path = base / path
    return Path(os.path.normpath(path))


class ArtifactResolver:
    """Finds the produced artifact for one project build."""

    def __init__(self, ctx: RunContext, project: ProjectFile | None = None) -> None:
        self._ctx = ctx
        self._project = project or ProjectFile(ctx.project_file)

    @property
    def project(self) -> ProjectFile:
        return self._project

    def resolve(self, build_output: str) -> str:
        """Artifact path normalized for output, or '' if nothing exists."""
        if self._ctx.output_override_dir is not None:
            found = self._probe(self._ctx.output_override_dir, self._project.extension)
            return self._report(found, tier="override")

        found = self.from_build_output(build_output)
        if found is not None:
            return self._report(found, tier="build_output")
        return self._report(self.from_project_file(), tier="project_file")

    # -------------------------------------------------------------------------
    # Tier 1: the DCC command line
    # -------------------------------------------------------------------------

    def from_build_output(self, build_output: str) -> Path | None:
        command_line = find_compiler_invocation(build_output)
        if not command_line:
            return None

        project = self._project
        output_dir = output_dir_from_invocation(command_line, project.is_package)
        if output_dir is None:
            return None

        extension = extract_flag(command_line, OUTPUT_EXT_FLAG) or project.extension
        if not extension.startswith("."):
            extension = "." + extension

        return self._probe(_host_dir(project.directory, output_dir), extension)

    # -------------------------------------------------------------------------
    # Tier 2: the project file
    # -------------------------------------------------------------------------

    def from_project_file(self) -> Path | None:
        ctx = self._ctx
        project = self._project
        extension = project.extension

        raw_dir = project.get_property(
            project.output_property, ctx.config, ctx.platform, ctx.env_vars
        )
        if raw_dir:
            resolved = project.resolve(raw_dir, ctx.config, ctx.platform, ctx.env_vars)
            return self._probe(_host_dir(project.directory, resolved), extension)

        deployed = project.deploy_output(ctx.config)
        if deployed:
            resolved = project.resolve(deployed, ctx.config, ctx.platform, ctx.env_vars)
            target = _host_dir(project.directory, resolved)
            if os.path.isfile(target):
                return target
            return self._probe(target.parent, extension)

        return self._probe(project.main_source_dir(), extension)

    # -------------------------------------------------------------------------

    def _probe(self, directory: Path, extension: str) -> Path | None:
        """``<name><ext>`` in ``directory``, then the library-suffixed variant."""
        name = self._project.name
        candidate = directory / f"{name}{extension}"
        if os.path.isfile(candidate):
            return candidate
        suffix = self._project.lib_suffix(self._ctx.env_vars)
        if suffix:
            candidate = directory / f"{name}{suffix}{extension}"
            if os.path.isfile(candidate):
                return candidate
        return None

    def _report(self, path: Path | None, *, tier: str) -> str:
        if path is None:
            log.debug("artifact.not_found", tier=tier, project=str(self._project.path))
            return ""
        log.debug("artifact.resolved", tier=tier, path=str(path))
        return normalize_for_output(str(path), self._ctx.wsl_mode)
