"""Report assembly - runs the build result pipeline end to end."""

from __future__ import annotations

import time
from collections.abc import Sequence
from pathlib import Path

import structlog

from dccsift.config.context import RunContext
from dccsift.core.logging import set_run_id
from dccsift.core.paths import normalize_for_output, to_host
from dccsift.diagnostics.context import add_source_context
from dccsift.diagnostics.models import ParseOutcome
from dccsift.diagnostics.parsers import collect_issues
from dccsift.lookup.ops import LookupClient
from dccsift.project.resolver import ArtifactResolver
from dccsift.report.models import BuildReport

log = structlog.get_logger(__name__)


def is_output_stale(path: Path, build_started_at: float | None) -> bool:
    """True if the artifact was last written before the build started."""
    if build_started_at is None:
        return False
    try:
        return path.stat().st_mtime < build_started_at
    except OSError:
        return False


def collect(build_output: str, ctx: RunContext) -> ParseOutcome:
    """Parse and enrich issues: collection, source context, then lookups."""
    outcome = collect_issues(build_output, ctx.max_errors, ctx.wsl_mode)
    add_source_context(
        outcome.issues,
        ctx.context_lines,
        project_dir=ctx.project_dir,
        ansi_encoding=ctx.ansi_encoding,
    )
    LookupClient.from_context(ctx).enrich(outcome.issues)
    return outcome


def build_report(
    build_output: str,
    exit_code: int,
    ctx: RunContext,
    *,
    build_started_at: float | None = None,
    time_ms: int | None = None,
    config_warnings: Sequence[str] = (),
) -> BuildReport:
    """Turn raw MSBuild output into a BuildReport.

    Args:
        build_output: Complete console output of the build.
        exit_code: MSBuild exit code.
        ctx: Read-only run context.
        build_started_at: Epoch seconds when the build started; enables the
            stale-output check.
        time_ms: Build duration. Defaults to the time since ``build_started_at``.
        config_warnings: Warnings from config discovery, passed through.
    """
    run_id = set_run_id()
    start = time.monotonic()

    outcome = collect(build_output, ctx)
    output_path = ArtifactResolver(ctx).resolve(build_output)
    stale = bool(output_path) and is_output_stale(Path(to_host(output_path)), build_started_at)

    if time_ms is None:
        time_ms = int((time.time() - build_started_at) * 1000) if build_started_at else 0

    report = BuildReport(
        project=ctx.project_file.name,
        project_path=normalize_for_output(ctx.project_path, ctx.wsl_mode),
        config=ctx.config,
        platform=ctx.platform,
        exit_code=exit_code,
        outcome=outcome,
        output_path=output_path,
        output_stale=stale,
        config_warnings=list(config_warnings),
        time_ms=time_ms,
    )
    log.info(
        "report.built",
        run_id=run_id,
        status=report.status,
        issues=len(outcome.issues),
        total_found=outcome.total_found,
        truncated=outcome.truncated,
        output=bool(output_path),
        elapsed_ms=int((time.monotonic() - start) * 1000),
    )
    return report
