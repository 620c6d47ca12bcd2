"""Response parsers for the external symbol lookup tool.

The tool changed its output across releases. Each supported response shape
has one parser, and the configured format picks it; output is never sniffed
to guess the shape.

JSON (``--json``)::

    {"found": true, "results": [{"type": "function", "unit": "MyUnit",
                                 "file": "W:\\\\src\\\\MyUnit.pas", "line": 42}]}

Text (older releases)::

    Found 1 result(s) for 'DoSomething':

    [function] DoSomething
      Unit: MyUnit
      File: W:\\src\\MyUnit.pas
      Line: 42
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from dccsift.config.constants import LOOKUP_RESULTS_MAX
from dccsift.diagnostics.models import LookupEntry, LookupResult

HINT_SYMBOL_ABSENT = "Symbol not in index. May be new, misspelled, or in non-indexed folder."
HINT_NO_STRUCTURED_OUTPUT = "Symbol lookup returned no structured output"
HINT_UNPARSABLE = "Failed to parse symbol lookup output"

ResponseParser = Callable[[str, str], LookupResult]


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _finish(symbol: str, entries: list[LookupEntry]) -> LookupResult:
    if not entries:
        return LookupResult.miss(symbol, HINT_SYMBOL_ABSENT)
    return LookupResult.ok(symbol, entries[:LOOKUP_RESULTS_MAX])


# =============================================================================
# JSON
# =============================================================================


def parse_json_response(output: str, symbol: str) -> LookupResult:
    """Parse ``--json`` output."""
    text = output.strip()
    if not text:
        return LookupResult.miss(symbol, HINT_SYMBOL_ABSENT)

    # stderr shares the pipe, so diagnostics may surround the object
    start, end = text.find("{"), text.rfind("}")
    if start < 0 or end < start:
        return LookupResult.miss(symbol, HINT_NO_STRUCTURED_OUTPUT)
    try:
        data = json.loads(text[start : end + 1])
    except json.JSONDecodeError:
        return LookupResult.miss(symbol, HINT_UNPARSABLE)
    if not isinstance(data, dict):
        return LookupResult.miss(symbol, HINT_UNPARSABLE)

    results = data.get("results")
    if not data.get("found", False) or not isinstance(results, list):
        return LookupResult.miss(symbol, HINT_SYMBOL_ABSENT)

    entries: list[LookupEntry] = []
    for item in results:
        if not isinstance(item, dict):
            continue
        unit = str(item.get("unit") or "")
        if not unit:
            continue
        entries.append(
            LookupEntry(
                unit=unit,
                path=str(item.get("file") or ""),
                kind=str(item.get("type") or "unknown"),
                line=_to_int(item.get("line")),
            )
        )
        if len(entries) >= LOOKUP_RESULTS_MAX:
            break
    return _finish(symbol, entries)


# =============================================================================
# Text
# =============================================================================

_TEXT_HEADER_RE = re.compile(r"^\[(?P<kind>[\w ]+)\]\s*(?P<name>.*)$")
_TEXT_FIELD_RE = re.compile(r"^(?P<key>unit|file|line)\s*:\s*(?P<value>.*)$", re.IGNORECASE)
_TEXT_NO_RESULTS_RE = re.compile(r"\bno (?:results|matches)\b", re.IGNORECASE)


@dataclass
class _TextRecord:
    kind: str
    fields: dict[str, str] = field(default_factory=dict)

    def to_entry(self) -> LookupEntry:
        return LookupEntry(
            unit=self.fields.get("unit", ""),
            path=self.fields.get("file", ""),
            kind=self.kind or "unknown",
            line=_to_int(self.fields.get("line")),
        )


def parse_text_response(output: str, symbol: str) -> LookupResult:
    """Parse the plain-text report of older tool releases."""
    text = output.strip()
    if not text or _TEXT_NO_RESULTS_RE.search(text):
        return LookupResult.miss(symbol, HINT_SYMBOL_ABSENT)

    records: list[_TextRecord] = []
    current: _TextRecord | None = None
    for raw in text.splitlines():
        line = raw.strip()
        header = _TEXT_HEADER_RE.match(line)
        if header:
            current = _TextRecord(kind=header.group("kind").strip().lower())
            records.append(current)
            continue
        field_match = _TEXT_FIELD_RE.match(line)
        if field_match and current is not None:
            current.fields[field_match.group("key").lower()] = field_match.group("value").strip()

    if not records:
        return LookupResult.miss(symbol, HINT_NO_STRUCTURED_OUTPUT)

    entries: list[LookupEntry] = []
    for record in records:
        entry = record.to_entry()
        if not entry.unit:
            continue
        entries.append(entry)
        if len(entries) >= LOOKUP_RESULTS_MAX:
            break
    return _finish(symbol, entries)


# =============================================================================
# Registry
# =============================================================================


@dataclass(frozen=True)
class ResponseFormat:
    """How to ask for and read one response shape."""

    name: str
    extra_args: tuple[str, ...]
    parser: ResponseParser

    def parse(self, output: str, symbol: str) -> LookupResult:
        return self.parser(output, symbol)


RESPONSE_FORMATS: dict[str, ResponseFormat] = {
    "json": ResponseFormat(name="json", extra_args=("--json",), parser=parse_json_response),
    "text": ResponseFormat(name="text", extra_args=(), parser=parse_text_response),
}


def get_response_format(name: str) -> ResponseFormat:
    """Look up a response format by its configured name."""
    try:
        return RESPONSE_FORMATS[name]
    except KeyError:
        raise ValueError(
            f"Unknown lookup response format: {name}. "
            f"Valid formats: {', '.join(sorted(RESPONSE_FORMATS))}"
        ) from None
