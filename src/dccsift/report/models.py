"""Report models - the structured result of one build."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from dccsift.diagnostics.models import Issue, ParseOutcome

Status = Literal["ok", "hints", "warnings", "error"]

STALE_OUTPUT_MESSAGE = (
    "Output file was NOT updated (likely locked by another process). "
    "The existing file is from a previous build. Release the lock and recompile."
)


@dataclass
class BuildReport:
    """Everything known about one compilation run."""

    project: str
    project_path: str
    config: str
    platform: str
    exit_code: int
    outcome: ParseOutcome = field(default_factory=ParseOutcome)
    output_path: str = ""
    output_stale: bool = False
    config_warnings: list[str] = field(default_factory=list)
    time_ms: int = 0

    @property
    def issues(self) -> list[Issue]:
        return self.outcome.issues

    @property
    def error_count(self) -> int:
        return self.outcome.error_count

    @property
    def warning_count(self) -> int:
        return self.outcome.warning_count

    @property
    def hint_count(self) -> int:
        return self.outcome.hint_count

    @property
    def status(self) -> Status:
        if self.error_count:
            return "error"
        if self.warning_count:
            return "warnings"
        if self.hint_count:
            return "hints"
        return "ok"

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the JSON report."""
        data: dict[str, Any] = {
            "status": self.status,
            "project": self.project,
            "project_path": self.project_path,
            "config": self.config,
            "platform": self.platform,
        }
        if self.output_path:
            data["output"] = self.output_path
            if self.output_stale:
                data["output_stale"] = True
                data["output_message"] = STALE_OUTPUT_MESSAGE
        if self.config_warnings:
            data["config_warnings"] = list(self.config_warnings)
        data.update(
            {
                "time_ms": self.time_ms,
                "exit_code": self.exit_code,
                "errors": self.error_count,
                "warnings": self.warning_count,
                "hints": self.hint_count,
            }
        )
        if self.outcome.truncated:
            data["truncated"] = True
            data["total_issues_found"] = self.outcome.total_found
        data["issues"] = [issue.to_dict() for issue in self.issues]
        return data


def invalid_report(message: str) -> dict[str, Any]:
    """Report shape for unusable arguments."""
    return {"status": "invalid", "error": message}


def internal_error_report(message: str) -> dict[str, Any]:
    """Report shape for unexpected failures outside the pipeline."""
    return {"status": "internal_error", "error": message}
