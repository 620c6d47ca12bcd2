"""Tests for project/variables.py module."""

from __future__ import annotations

import pytest

from dccsift.project.variables import resolve_env_vars, resolve_variables


class TestResolveEnvVars:
    """Tests for resolve_env_vars."""

    def test_table_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Names in the table are substituted case-insensitively."""
        monkeypatch.delenv("MORMOT2", raising=False)
        assert resolve_env_vars("$(mORMot2)\\src", {"MORMOT2": "W:\\libs\\m2"}) == (
            "W:\\libs\\m2\\src"
        )

    def test_unknown_names_untouched(self) -> None:
        """Placeholders missing from the table stay as written."""
        assert resolve_env_vars("$(Nope)\\x", {}) == "$(Nope)\\x"

    def test_process_environment_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A real environment variable overrides the table."""
        monkeypatch.setenv("DCCSIFT_TEST_LIBS", "D:\\override")
        assert resolve_env_vars("$(DCCSIFT_TEST_LIBS)", {"DCCSIFT_TEST_LIBS": "W:\\libs"}) == (
            "D:\\override"
        )

    def test_no_placeholders(self) -> None:
        """Plain strings pass through."""
        assert resolve_env_vars("W:\\out", {"X": "y"}) == "W:\\out"


class TestResolveVariables:
    """Tests for resolve_variables."""

    def test_builtins(self) -> None:
        """Config, platform, and project dir placeholders resolve."""
        result = resolve_variables(
            "$(ProjectDir)$(Platform)\\$(Config)\\$(Configuration)",
            config="Release",
            platform="Win64",
            project_dir="W:\\src\\",
            env_vars={},
        )
        assert result == "W:\\src\\Win64\\Release\\Release"

    def test_builtins_case_insensitive(self) -> None:
        """Built-in names ignore case."""
        result = resolve_variables(
            ".\\$(PLATFORM)\\$(config)",
            config="Debug",
            platform="Win32",
            project_dir="",
            env_vars={},
        )
        assert result == ".\\Win32\\Debug"

    def test_builtins_then_table(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Table variables resolve after built-ins."""
        monkeypatch.delenv("OUTROOT", raising=False)
        result = resolve_variables(
            "$(OUTROOT)\\$(Platform)",
            config="Debug",
            platform="Win64",
            project_dir="",
            env_vars={"OUTROOT": "W:\\bin"},
        )
        assert result == "W:\\bin\\Win64"
