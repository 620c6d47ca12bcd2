"""dccsift report command - turn a build log into the JSON report."""

from __future__ import annotations

from pathlib import Path
from typing import IO

import click

from dccsift.cli.utils import (
    CONFIGS,
    CONTEXT_LINES_RANGE,
    MAX_ERRORS_RANGE,
    PLATFORMS,
    canonical_choice,
    clamp,
    echo_json,
    fail_internal,
    fail_invalid,
    read_build_output,
    validate_project_path,
)
from dccsift.config.context import RunContext
from dccsift.config.discovery import discover
from dccsift.config.loader import load_config
from dccsift.core.errors import ConfigError, InternalError, ProjectError
from dccsift.core.logging import configure_logging, get_logger
from dccsift.report.ops import build_report

log = get_logger("cli.report")


@click.command()
@click.argument("project")
@click.option(
    "--log",
    "log_file",
    type=click.File("rb"),
    default="-",
    show_default=True,
    help="Captured MSBuild output ('-' for stdin)",
)
@click.option("--config", "build_config", default="Debug", help="Debug or Release")
@click.option("--platform", default="Win32", help="Win32 or Win64")
@click.option("--exit-code", type=int, default=0, help="MSBuild exit code")
@click.option("--max-errors", type=int, default=None, help="Errors to keep (1-10)")
@click.option("--context-lines", type=int, default=None, help="Source lines each side (0-20)")
@click.option("--wsl", is_flag=True, help="Report /mnt/<drive>/ paths")
@click.option(
    "--started-at",
    type=float,
    default=None,
    help="Build start as epoch seconds; enables the stale-output check",
)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Sandbox directory the build compiled into",
)
@click.pass_context
def report_command(
    ctx: click.Context,
    project: str,
    log_file: IO[bytes],
    build_config: str,
    platform: str,
    exit_code: int,
    max_errors: int | None,
    context_lines: int | None,
    wsl: bool,
    started_at: float | None,
    output_dir: Path | None,
) -> None:
    """Analyze MSBuild output for a Delphi project.

    PROJECT is the full path to the .dproj, in Windows (W:\\...) or WSL
    (/mnt/w/...) form.
    """
    config_name = canonical_choice(build_config, CONFIGS)
    if config_name is None:
        fail_invalid("Invalid config value. Use Debug or Release.")
    platform_name = canonical_choice(platform, PLATFORMS)
    if platform_name is None:
        fail_invalid("Invalid platform value. Use Win32 or Win64.")

    try:
        project_file = validate_project_path(project)
        config = load_config(project_file.parent)
    except (ProjectError, ConfigError) as e:
        fail_invalid(e.message)

    try:
        if not (ctx.obj or {}).get("verbose"):
            configure_logging(config=config.logging)

        discovered = discover(config, project)
        run_ctx = RunContext.from_config(
            config,
            discovered,
            project,
            build_config=config_name,
            platform=platform_name,
            wsl_mode=True if wsl else None,
            max_errors=clamp(max_errors, MAX_ERRORS_RANGE) if max_errors is not None else None,
            context_lines=(
                clamp(context_lines, CONTEXT_LINES_RANGE) if context_lines is not None else None
            ),
            output_override_dir=output_dir,
        )

        build_output = read_build_output(log_file, run_ctx.ansi_encoding)
        report = build_report(
            build_output,
            exit_code,
            run_ctx,
            build_started_at=started_at,
            config_warnings=discovered.warnings,
        )
    except Exception as e:
        error = InternalError.unexpected(f"{type(e).__name__}: {e}", project=project)
        log.exception("report.failed", **error.to_dict())
        fail_internal(error.details["reason"])

    echo_json(report.to_dict())
    if report.status == "error":
        ctx.exit(1)
