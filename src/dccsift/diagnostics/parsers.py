"""Parsers for DCC compiler diagnostics in MSBuild console output."""

from __future__ import annotations

import re

from dccsift.core.paths import normalize_for_output
from dccsift.diagnostics.context import split_source_lines
from dccsift.diagnostics.models import Issue, IssueKind, ParseOutcome

# Format: file(line[,col]): Severity Code: message [origin]
#   C:\Path\File.pas(123,45): Error E2003: Undeclared identifier: 'Foo'
#   SynTest.dpr(5): error F1026: File not found: 'mormot.defines.inc' [W:\...\SynTest.dproj]
#   TestHint.dpr(6): Hint warning H2164: Variable 'X' is declared but never used
# "Hint warning" is listed before "Hint" so the longer token wins.
_DIAGNOSTIC_RE = re.compile(
    r"^(.+\.(?:pas|dpr|dpk|inc))"
    r"\((\d+)(?:,(\d+))?\):\s*"
    r"(Fatal|Error|Warning|Hint\s*warning|Hint)\s+"
    r"([A-Z]\d+):\s*"
    r"(.+?)(?:\s*\[.+\])?$",
    re.IGNORECASE,
)


def _kind_from_str(s: str) -> IssueKind:
    """Convert a severity token to IssueKind. Unknown tokens count as errors."""
    s = " ".join(s.lower().split())
    if s == "fatal":
        return IssueKind.FATAL
    if s == "warning":
        return IssueKind.WARNING
    if s in ("hint warning", "hintwarning", "hint"):
        return IssueKind.HINT
    return IssueKind.ERROR


def parse_line(line: str, wsl_mode: bool = False) -> Issue | None:
    """Parse one trimmed output line. Returns None for anything that is not a diagnostic."""
    match = _DIAGNOSTIC_RE.match(line)
    if match is None:
        return None
    column = match.group(3)
    return Issue(
        kind=_kind_from_str(match.group(4)),
        code=match.group(5),
        path=normalize_for_output(match.group(1), wsl_mode),
        line=int(match.group(2)),
        column=int(column) if column else 1,
        message=match.group(6).strip(),
    )


def collect_issues(output: str, max_errors: int, wsl_mode: bool = False) -> ParseOutcome:
    """Collect distinct issues from build output, storing at most ``max_errors`` errors.

    MSBuild at normal verbosity echoes every compiler line a second time, so
    issues are deduplicated on (file, line, code). Once the error cap is
    exceeded nothing more is stored, warnings and hints included, but every
    distinct issue keeps counting toward ``total_found``.
    """
    outcome = ParseOutcome()
    seen: set[tuple[str, int, str]] = set()
    error_count = 0
    collecting = True

    for raw in split_source_lines(output):
        issue = parse_line(raw.strip(), wsl_mode)
        if issue is None:
            continue
        if issue.key in seen:
            continue
        seen.add(issue.key)
        outcome.total_found += 1

        if not collecting:
            continue
        if issue.kind.is_error:
            error_count += 1
            if error_count > max_errors:
                outcome.truncated = True
                collecting = False
                continue
        outcome.issues.append(issue)

    return outcome
