"""Source context windows around reported issue locations."""

from __future__ import annotations

import codecs
import os
import re
from collections.abc import Iterable
from pathlib import Path

import structlog

from dccsift.config.constants import CONTEXT_MARKER
from dccsift.core.paths import to_host
from dccsift.diagnostics.models import Issue

log = structlog.get_logger(__name__)

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")

_BOMS: tuple[tuple[bytes, str], ...] = (
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)


def decode_source(data: bytes, ansi_encoding: str = "cp1252") -> str:
    """Decode source bytes: BOM first, then UTF-8, then the ANSI code page."""
    for bom, encoding in _BOMS:
        if data.startswith(bom):
            return data[len(bom) :].decode(encoding, errors="replace")
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return data.decode(ansi_encoding, errors="replace")


def split_source_lines(text: str) -> list[str]:
    """Split on CRLF, CR, or LF only, the way the compiler counts lines."""
    if not text:
        return []
    lines = _LINE_BREAK_RE.split(text)
    if lines[-1] == "":
        lines.pop()
    return lines


def format_window(lines: list[str], center: int, radius: int) -> list[str]:
    """Render lines ``center-radius .. center+radius`` (1-based, clamped)."""
    start = max(center - radius, 1)
    end = min(center + radius, len(lines))
    window: list[str] = []
    for number in range(start, end + 1):
        marker = CONTEXT_MARKER if number == center else ""
        window.append(f"{number:4d}: {lines[number - 1]}{marker}")
    return window


def read_context(
    path: Path, center: int, radius: int, ansi_encoding: str = "cp1252"
) -> list[str]:
    """Read ``path`` and return the formatted window, or [] if unreadable."""
    try:
        data = path.read_bytes()
        text = decode_source(data, ansi_encoding)
    except (OSError, LookupError) as e:
        log.debug("context.unreadable", path=str(path), error=str(e))
        return []
    return format_window(split_source_lines(text), center, radius)


def resolve_source_path(issue_path: str, project_dir: Path | None) -> Path:
    """Host path for an issue's file; relative paths are taken from the project directory."""
    path = Path(to_host(issue_path))
    if not path.is_absolute() and project_dir is not None:
        path = project_dir / path
    return path


def add_source_context(
    issues: Iterable[Issue],
    radius: int,
    *,
    project_dir: Path | None = None,
    ansi_encoding: str = "cp1252",
) -> None:
    """Attach a context window to every issue whose source file exists."""
    for issue in issues:
        if not issue.path:
            continue
        path = resolve_source_path(issue.path, project_dir)
        if not os.path.isfile(path):
            continue
        issue.context = read_context(path, issue.line, radius, ansi_encoding)
