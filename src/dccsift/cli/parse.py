"""dccsift parse command - issues only, no project needed."""

from __future__ import annotations

from typing import IO, Any

import click

from dccsift.cli.utils import MAX_ERRORS_RANGE, clamp, echo_json, read_build_output
from dccsift.config.constants import MAX_ERRORS_DEFAULT
from dccsift.diagnostics.parsers import collect_issues


@click.command()
@click.option(
    "--log",
    "log_file",
    type=click.File("rb"),
    default="-",
    show_default=True,
    help="Captured MSBuild output ('-' for stdin)",
)
@click.option("--max-errors", type=int, default=MAX_ERRORS_DEFAULT, show_default=True)
@click.option("--wsl", is_flag=True, help="Report /mnt/<drive>/ paths")
@click.option("--encoding", default="cp1252", show_default=True, help="Fallback log encoding")
def parse_command(log_file: IO[bytes], max_errors: int, wsl: bool, encoding: str) -> None:
    """Print the diagnostics found in a build log."""
    outcome = collect_issues(
        read_build_output(log_file, encoding),
        clamp(max_errors, MAX_ERRORS_RANGE),
        wsl_mode=wsl,
    )
    data: dict[str, Any] = {
        "errors": outcome.error_count,
        "warnings": outcome.warning_count,
        "hints": outcome.hint_count,
    }
    if outcome.truncated:
        data["truncated"] = True
        data["total_issues_found"] = outcome.total_found
    data["issues"] = [issue.to_dict() for issue in outcome.issues]
    echo_json(data)
