"""CLI utilities."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import IO, Any, NoReturn

import click

from dccsift.core.errors import ProjectError
from dccsift.core.paths import to_host
from dccsift.diagnostics.context import decode_source
from dccsift.report.models import internal_error_report, invalid_report

CONFIGS = ("Debug", "Release")
PLATFORMS = ("Win32", "Win64")

MAX_ERRORS_RANGE = (1, 10)
CONTEXT_LINES_RANGE = (0, 20)

EXIT_INVALID = 2
EXIT_INTERNAL = 1


def echo_json(data: dict[str, Any]) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


def fail_invalid(message: str) -> NoReturn:
    """Print the invalid-arguments report and exit."""
    echo_json(invalid_report(message))
    raise click.exceptions.Exit(EXIT_INVALID)


def fail_internal(message: str) -> NoReturn:
    echo_json(internal_error_report(message))
    raise click.exceptions.Exit(EXIT_INTERNAL)


def clamp(value: int, bounds: tuple[int, int]) -> int:
    low, high = bounds
    return max(low, min(high, value))


def canonical_choice(value: str, choices: tuple[str, ...]) -> str | None:
    """Case-insensitive match against ``choices``, returning the canonical spelling."""
    for choice in choices:
        if choice.lower() == value.lower():
            return choice
    return None


def validate_project_path(project: str) -> Path:
    """Check a project argument and return its host-openable path.

    Raises:
        ProjectError: If the path is bare, not a .dproj, or does not exist.
    """
    if "/" not in project and "\\" not in project:
        raise ProjectError.invalid(
            project, "a full path is required, not just a file name"
        )
    if not project.lower().endswith(".dproj"):
        raise ProjectError.invalid(project, "project file must have a .dproj extension")
    host = Path(to_host(project))
    if not os.path.isfile(host):
        raise ProjectError.not_found(project)
    return host


def read_build_output(stream: IO[bytes], ansi_encoding: str) -> str:
    """Read a captured MSBuild log, tolerating ANSI-encoded output."""
    return decode_source(stream.read(), ansi_encoding)
