"""Tests for lookup/ops.py module.

Covers:
- Issue qualification helpers
- LookupClient.lookup_symbol() via a patched subprocess
- LookupClient.lookup_file() over a real index file
- LookupClient.enrich()
"""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from dccsift.diagnostics.models import Issue, IssueKind
from dccsift.lookup.ops import (
    HINT_FILE_ABSENT,
    HINT_INDEX_NOT_CONFIGURED,
    HINT_TOOL_NOT_CONFIGURED,
    LookupClient,
    extract_quoted_name,
    is_file_not_found,
    is_undeclared_identifier,
)
from dccsift.lookup.protocols import HINT_SYMBOL_ABSENT

FOUND_JSON = json.dumps(
    {
        "found": True,
        "results": [
            {"type": "function", "unit": "Helpers", "file": "W:\\src\\Helpers.pas", "line": 12}
        ],
    }
)


@pytest.fixture
def tool(tmp_path: Path) -> Path:
    path = tmp_path / "delphi-lookup.exe"
    path.write_text("")
    return path


def _completed(stdout: str, returncode: int = 0) -> subprocess.CompletedProcess[bytes]:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout.encode())


def _undeclared(name: str) -> Issue:
    return Issue(IssueKind.ERROR, "E2003", "Main.pas", 1, f"Undeclared identifier: '{name}'")


def _file_missing(name: str) -> Issue:
    return Issue(IssueKind.FATAL, "F1026", "Main.dpr", 1, f"File not found: '{name}'")


class TestHelpers:
    """Tests for qualification helpers."""

    def test_undeclared_identifier(self) -> None:
        """E2003 with the expected message qualifies."""
        assert is_undeclared_identifier(_undeclared("Foo"))
        assert not is_undeclared_identifier(
            Issue(IssueKind.ERROR, "E2010", "a.pas", 1, "Undeclared identifier: 'x'")
        )

    def test_file_not_found(self) -> None:
        """F1026 with the expected message qualifies."""
        assert is_file_not_found(_file_missing("X.pas"))
        assert not is_file_not_found(_undeclared("X"))

    def test_extract_quoted_name(self) -> None:
        """First quoted name is returned."""
        assert extract_quoted_name("Undeclared identifier: 'DoSomething'") == "DoSomething"
        assert extract_quoted_name("no quotes") == ""


class TestLookupSymbol:
    """Tests for LookupClient.lookup_symbol."""

    def test_tool_not_configured(self) -> None:
        """No tool means a hint, never a subprocess."""
        with patch("dccsift.lookup.ops.subprocess.run") as run:
            result = LookupClient().lookup_symbol("Foo")

        run.assert_not_called()
        assert result.found is False
        assert result.hint == HINT_TOOL_NOT_CONFIGURED

    def test_tool_missing(self, tmp_path: Path) -> None:
        """A configured tool that does not exist is named in the hint."""
        missing = tmp_path / "gone.exe"

        result = LookupClient(tool=missing).lookup_symbol("Foo")

        assert result.hint == f"Symbol lookup tool not found at {missing}"

    def test_command_line(self, tool: Path) -> None:
        """Tool is invoked with symbol, result limit, and the format flag."""
        with patch("dccsift.lookup.ops.subprocess.run", return_value=_completed(FOUND_JSON)) as run:
            LookupClient(tool=tool).lookup_symbol("DoSomething")

        cmd = run.call_args.args[0]
        assert cmd == [str(tool), "DoSomething", "-n", "3", "--json"]
        assert run.call_args.kwargs["timeout"] == 5.0
        assert run.call_args.kwargs["stderr"] == subprocess.STDOUT

    def test_text_format_has_no_flag(self, tool: Path) -> None:
        """The text protocol does not pass --json."""
        client = LookupClient(tool=tool, response_format="text", max_results=2)
        assert client.build_command("X") == [str(tool), "X", "-n", "2"]

    def test_found(self, tool: Path) -> None:
        """Parsed entries are returned."""
        with patch("dccsift.lookup.ops.subprocess.run", return_value=_completed(FOUND_JSON)):
            result = LookupClient(tool=tool).lookup_symbol("DoSomething")

        assert result.found is True
        assert result.entries[0].unit == "Helpers"
        assert result.entries[0].path == "W:\\src\\Helpers.pas"

    def test_found_wsl_paths(self, tool: Path) -> None:
        """Entry paths follow the output convention."""
        with patch("dccsift.lookup.ops.subprocess.run", return_value=_completed(FOUND_JSON)):
            result = LookupClient(tool=tool, wsl_mode=True).lookup_symbol("DoSomething")

        assert result.entries[0].path == "/mnt/w/src/Helpers.pas"

    def test_no_matches(self, tool: Path) -> None:
        """No matches gives found=false, no entries, and a hint."""
        output = '{"found": false, "results": []}'
        with patch("dccsift.lookup.ops.subprocess.run", return_value=_completed(output, 1)):
            result = LookupClient(tool=tool).lookup_symbol("Nope")

        assert result.found is False
        assert result.entries == ()
        assert result.hint == HINT_SYMBOL_ABSENT

    def test_timeout(self, tool: Path) -> None:
        """A timeout becomes a hint."""
        error = subprocess.TimeoutExpired(cmd=[str(tool)], timeout=5.0)
        with patch("dccsift.lookup.ops.subprocess.run", side_effect=error):
            result = LookupClient(tool=tool).lookup_symbol("Slow")

        assert result.found is False
        assert result.hint == "Symbol lookup timed out after 5s"

    def test_start_failure(self, tool: Path) -> None:
        """OS errors starting the tool become a hint."""
        with patch("dccsift.lookup.ops.subprocess.run", side_effect=PermissionError("denied")):
            result = LookupClient(tool=tool).lookup_symbol("Foo")

        assert result.hint.startswith("Failed to start symbol lookup tool")

    def test_undecodable_output(self, tool: Path) -> None:
        """Invalid bytes in the output do not raise."""
        completed = subprocess.CompletedProcess(args=[], returncode=0, stdout=b"\xff\xfe garbage")
        with patch("dccsift.lookup.ops.subprocess.run", return_value=completed):
            result = LookupClient(tool=tool).lookup_symbol("Foo")

        assert result.found is False
        assert result.hint


class TestLookupFile:
    """Tests for LookupClient.lookup_file."""

    @pytest.fixture
    def index(self, tmp_path: Path) -> Path:
        path = tmp_path / ".file-index.txt"
        path.write_text(
            "\n".join(
                [
                    "W:\\libs\\mORMot2\\src\\mormot.defines.inc",
                    "W:\\libs\\mORMot2\\src\\core\\mormot.core.base.pas",
                    "W:\\libs\\old\\MORMOT.DEFINES.INC",
                    "",
                    "W:\\src\\Other.pas",
                ]
            )
        )
        return path

    def test_not_configured(self) -> None:
        """No index gives a hint."""
        assert LookupClient().lookup_file("x.pas").hint == HINT_INDEX_NOT_CONFIGURED

    def test_index_missing(self, tmp_path: Path) -> None:
        """A configured index that is missing is named in the hint."""
        missing = tmp_path / "none.txt"
        assert LookupClient(file_index=missing).lookup_file("x.pas").hint == (
            f"File index not found at {missing}"
        )

    def test_case_insensitive_matches(self, index: Path) -> None:
        """File names match case-insensitively."""
        result = LookupClient(file_index=index).lookup_file("mormot.defines.inc")

        assert result.found is True
        assert [e.path for e in result.entries] == [
            "W:\\libs\\mORMot2\\src\\mormot.defines.inc",
            "W:\\libs\\old\\MORMOT.DEFINES.INC",
        ]
        entry = result.entries[0]
        assert entry.unit == "mormot.defines"
        assert entry.kind == "file"
        assert entry.line == 0

    def test_directory_names_do_not_match(self, index: Path) -> None:
        """Only the file name part is searched."""
        result = LookupClient(file_index=index).lookup_file("libs")
        assert result.found is False
        assert result.hint == HINT_FILE_ABSENT

    def test_wsl_paths(self, index: Path) -> None:
        """Indexed paths follow the output convention."""
        result = LookupClient(file_index=index, wsl_mode=True).lookup_file("Other.pas")
        assert result.entries[0].path == "/mnt/w/src/Other.pas"


class TestEnrich:
    """Tests for LookupClient.enrich."""

    def test_only_qualifying_issues_enriched(self, tool: Path, tmp_path: Path) -> None:
        """E2003 gets a symbol lookup, F1026 a file lookup, others nothing."""
        index = tmp_path / "index.txt"
        index.write_text("W:\\src\\Missing.pas\n")
        issues = [
            _undeclared("DoSomething"),
            _file_missing("Missing.pas"),
            Issue(IssueKind.WARNING, "W1000", "a.pas", 1, "Symbol 'X' is deprecated"),
        ]

        with patch(
            "dccsift.lookup.ops.subprocess.run", return_value=_completed(FOUND_JSON)
        ) as run:
            LookupClient(tool=tool, file_index=index).enrich(issues)

        assert run.call_count == 1
        assert issues[0].lookup is not None and issues[0].lookup.found
        assert issues[1].lookup is not None and issues[1].lookup.entries[0].unit == "Missing"
        assert issues[2].lookup is None

    def test_one_subprocess_per_symbol(self, tool: Path) -> None:
        """Lookups run sequentially, one per qualifying issue."""
        issues = [_undeclared("A"), _undeclared("B"), _undeclared("C")]

        with patch(
            "dccsift.lookup.ops.subprocess.run", return_value=_completed(FOUND_JSON)
        ) as run:
            LookupClient(tool=tool).enrich(issues)

        assert [c.args[0][1] for c in run.call_args_list] == ["A", "B", "C"]
