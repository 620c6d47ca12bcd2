"""Lookup operations - symbol and file lookups for unresolved names."""

from __future__ import annotations

import os
import re
import subprocess
from collections.abc import Iterable
from dataclasses import replace
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from dccsift.config.constants import LOOKUP_RESULTS_MAX, LOOKUP_TIMEOUT_SEC_DEFAULT
from dccsift.core.paths import normalize_for_output
from dccsift.diagnostics.models import Issue, LookupEntry, LookupResult
from dccsift.lookup.protocols import ResponseFormat, get_response_format

if TYPE_CHECKING:
    from dccsift.config.context import RunContext

log = structlog.get_logger(__name__)

UNDECLARED_IDENTIFIER_CODE = "E2003"
FILE_NOT_FOUND_CODE = "F1026"

HINT_TOOL_NOT_CONFIGURED = "Symbol lookup tool not configured"
HINT_INDEX_NOT_CONFIGURED = "File index not configured"
HINT_INDEX_UNREADABLE = "Could not read file index"
HINT_FILE_ABSENT = "File not in index. Check search paths or file existence."

_QUOTED_NAME_RE = re.compile(r"'([^']+)'")
_PATH_SEPARATORS_RE = re.compile(r"[\\/]")

# Keep the lookup tool from flashing a console window on Windows
_CREATION_FLAGS = getattr(subprocess, "CREATE_NO_WINDOW", 0)


def is_undeclared_identifier(issue: Issue) -> bool:
    """E2003: Undeclared identifier: 'X'."""
    return issue.code == UNDECLARED_IDENTIFIER_CODE and "Undeclared identifier" in issue.message


def is_file_not_found(issue: Issue) -> bool:
    """F1026: File not found: 'Unit.pas'."""
    return issue.code == FILE_NOT_FOUND_CODE and "File not found" in issue.message


def extract_quoted_name(message: str) -> str:
    """First single-quoted name in a message, or '' if there is none."""
    match = _QUOTED_NAME_RE.search(message)
    return match.group(1) if match else ""


def _file_name(path: str) -> str:
    return _PATH_SEPARATORS_RE.split(path)[-1]


class LookupClient:
    """Resolves undeclared identifiers and missing files for compiler issues.

    Symbol lookups run the external tool once per issue, sequentially, each
    bounded by its own timeout. File lookups scan a flat file index. Every
    failure becomes a hint on the result; nothing here raises.
    """

    def __init__(
        self,
        *,
        tool: Path | None = None,
        response_format: str = "json",
        timeout_sec: float = LOOKUP_TIMEOUT_SEC_DEFAULT,
        max_results: int = LOOKUP_RESULTS_MAX,
        file_index: Path | None = None,
        wsl_mode: bool = False,
    ) -> None:
        self._tool = tool
        self._format: ResponseFormat = get_response_format(response_format)
        self._timeout_sec = timeout_sec
        self._max_results = max_results
        self._file_index = file_index
        self._wsl_mode = wsl_mode

    @classmethod
    def from_context(cls, ctx: RunContext) -> LookupClient:
        return cls(
            tool=ctx.lookup_tool,
            response_format=ctx.lookup_format,
            timeout_sec=ctx.lookup_timeout_sec,
            max_results=ctx.lookup_max_results,
            file_index=ctx.file_index,
            wsl_mode=ctx.wsl_mode,
        )

    def enrich(self, issues: Iterable[Issue]) -> None:
        """Attach lookup results to qualifying issues."""
        for issue in issues:
            if is_undeclared_identifier(issue):
                name = extract_quoted_name(issue.message)
                if name:
                    issue.lookup = self.lookup_symbol(name)
            elif is_file_not_found(issue):
                name = extract_quoted_name(issue.message)
                if name:
                    issue.lookup = self.lookup_file(name)

    # -------------------------------------------------------------------------
    # Symbols
    # -------------------------------------------------------------------------

    def build_command(self, symbol: str) -> list[str]:
        """``<tool> "<symbol>" -n <limit> [--json]``."""
        return [
            str(self._tool),
            symbol,
            "-n",
            str(self._max_results),
            *self._format.extra_args,
        ]

    def lookup_symbol(self, symbol: str) -> LookupResult:
        """Ask the external tool where ``symbol`` is declared."""
        if self._tool is None:
            return LookupResult.miss(symbol, HINT_TOOL_NOT_CONFIGURED)
        if not os.path.isfile(self._tool):
            return LookupResult.miss(symbol, f"Symbol lookup tool not found at {self._tool}")

        cmd = self.build_command(symbol)
        try:
            # Pipes are closed and the child reaped even when the timeout fires
            completed = subprocess.run(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                timeout=self._timeout_sec,
                check=False,
                creationflags=_CREATION_FLAGS,
            )
        except subprocess.TimeoutExpired:
            log.warning("lookup.timeout", symbol=symbol, timeout_sec=self._timeout_sec)
            return LookupResult.miss(
                symbol, f"Symbol lookup timed out after {self._timeout_sec:g}s"
            )
        except OSError as e:
            log.warning("lookup.start_failed", symbol=symbol, error=str(e))
            return LookupResult.miss(symbol, f"Failed to start symbol lookup tool: {e}")

        output = (completed.stdout or b"").decode("utf-8", errors="replace")
        log.debug(
            "lookup.completed",
            symbol=symbol,
            exit_code=completed.returncode,
            output_bytes=len(completed.stdout or b""),
        )
        return self._normalized(self._format.parse(output, symbol))

    # -------------------------------------------------------------------------
    # Files
    # -------------------------------------------------------------------------

    def lookup_file(self, file_name: str) -> LookupResult:
        """Find indexed files whose name contains ``file_name`` (case-insensitive)."""
        if self._file_index is None:
            return LookupResult.miss(file_name, HINT_INDEX_NOT_CONFIGURED)
        if not os.path.isfile(self._file_index):
            return LookupResult.miss(file_name, f"File index not found at {self._file_index}")

        try:
            content = self._file_index.read_text(encoding="utf-8-sig", errors="replace")
        except OSError as e:
            log.warning("lookup.index_unreadable", path=str(self._file_index), error=str(e))
            return LookupResult.miss(file_name, HINT_INDEX_UNREADABLE)

        needle = file_name.lower()
        entries: list[LookupEntry] = []
        for raw in content.splitlines():
            indexed = raw.strip()
            if not indexed:
                continue
            name = _file_name(indexed)
            if needle not in name.lower():
                continue
            entries.append(
                LookupEntry(
                    unit=os.path.splitext(name)[0],
                    path=normalize_for_output(indexed, self._wsl_mode),
                    kind="file",
                    line=0,
                )
            )
            if len(entries) >= LOOKUP_RESULTS_MAX:
                break

        if not entries:
            return LookupResult.miss(file_name, HINT_FILE_ABSENT)
        return LookupResult.ok(file_name, entries)

    def _normalized(self, result: LookupResult) -> LookupResult:
        if not result.entries:
            return result
        entries = tuple(
            replace(e, path=normalize_for_output(e.path, self._wsl_mode)) for e in result.entries
        )
        return replace(result, entries=entries)
