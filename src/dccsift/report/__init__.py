"""Report module - assembling the structured build report."""

from dccsift.report.models import BuildReport, internal_error_report, invalid_report
from dccsift.report.ops import build_report, collect

__all__ = [
    "BuildReport",
    "build_report",
    "collect",
    "internal_error_report",
    "invalid_report",
]
