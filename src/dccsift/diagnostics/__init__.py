"""Diagnostics module - compiler issue parsing and source context."""

from dccsift.diagnostics.context import add_source_context
from dccsift.diagnostics.models import (
    Issue,
    IssueKind,
    LookupEntry,
    LookupResult,
    ParseOutcome,
)
from dccsift.diagnostics.parsers import collect_issues, parse_line

__all__ = [
    "Issue",
    "IssueKind",
    "LookupEntry",
    "LookupResult",
    "ParseOutcome",
    "add_source_context",
    "collect_issues",
    "parse_line",
]
