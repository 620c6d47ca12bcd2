"""Diagnostic models - issues, lookups, and parse outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class IssueKind(Enum):
    """Compiler issue severity."""

    FATAL = "fatal"
    ERROR = "error"
    WARNING = "warning"
    HINT = "hint"

    @property
    def is_error(self) -> bool:
        return self in (IssueKind.ERROR, IssueKind.FATAL)


@dataclass(frozen=True)
class LookupEntry:
    """One candidate declaration site (or file) for an unresolved name."""

    unit: str
    path: str
    kind: str = "unknown"  # function, procedure, type, const, var, file, unknown
    line: int = 0  # 0 when unknown, e.g. file-only matches

    def to_dict(self) -> dict[str, Any]:
        return {"unit": self.unit, "path": self.path, "type": self.kind, "line": self.line}


@dataclass(frozen=True)
class LookupResult:
    """Outcome of a symbol or file lookup.

    Either ``found`` with entries, or not found with a hint explaining why.
    """

    symbol: str
    found: bool = False
    entries: tuple[LookupEntry, ...] = ()
    hint: str = ""

    @classmethod
    def ok(cls, symbol: str, entries: list[LookupEntry]) -> LookupResult:
        return cls(symbol=symbol, found=True, entries=tuple(entries))

    @classmethod
    def miss(cls, symbol: str, hint: str) -> LookupResult:
        return cls(symbol=symbol, hint=hint)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"found": self.found, "symbol": self.symbol}
        if self.found and self.entries:
            data["results"] = [e.to_dict() for e in self.entries]
        elif self.hint:
            data["hint"] = self.hint
        return data


@dataclass
class Issue:
    """A single compiler diagnostic."""

    kind: IssueKind
    code: str  # E2003, W1000, H2164
    path: str  # normalized for output
    line: int
    message: str
    column: int = 1
    context: list[str] = field(default_factory=list)
    lookup: LookupResult | None = None

    @property
    def key(self) -> tuple[str, int, str]:
        """Deduplication identity."""
        return (self.path, self.line, self.code)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.kind.value,
            "code": self.code,
            "file": self.path,
            "line": self.line,
            "column": self.column,
            "message": self.message,
        }
        if self.context:
            data["context"] = list(self.context)
        if self.lookup is not None:
            data["lookup"] = self.lookup.to_dict()
        return data


@dataclass
class ParseOutcome:
    """Issues collected from one build output."""

    issues: list[Issue] = field(default_factory=list)
    truncated: bool = False
    total_found: int = 0  # distinct issues seen, stored or not

    @property
    def error_count(self) -> int:
        return sum(1 for i in self.issues if i.kind.is_error)

    @property
    def warning_count(self) -> int:
        return sum(1 for i in self.issues if i.kind == IssueKind.WARNING)

    @property
    def hint_count(self) -> int:
        return sum(1 for i in self.issues if i.kind == IssueKind.HINT)
