"""Tests for project/dproj.py module.

Covers:
- Artifact kind detection (exe, dll, bpl)
- get_property() with scoped groups and imported option sets
- deploy_output()
- lib_suffix()
"""

from __future__ import annotations

from pathlib import Path

import pytest

from dccsift.project.dproj import ProjectFile

CONFIGS = """  <ItemGroup>
    <BuildConfiguration Include="Debug">
      <Key>Cfg_1</Key>
    </BuildConfiguration>
    <BuildConfiguration Include="Release">
      <Key>Cfg_2</Key>
    </BuildConfiguration>
  </ItemGroup>
"""


def _dproj(main_source: str = "MyProj.dpr", body: str = "") -> str:
    return (
        "<Project>\n"
        "  <PropertyGroup>\n"
        f"    <MainSource>{main_source}</MainSource>\n"
        "  </PropertyGroup>\n"
        f"{CONFIGS}{body}</Project>\n"
    )


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


class TestArtifactKind:
    """Tests for extension and package detection."""

    def test_application(self, tmp_path: Path) -> None:
        """A .dpr without a library marker builds an .exe."""
        project = ProjectFile(tmp_path / "MyProj.dproj", _dproj())

        assert project.extension == ".exe"
        assert project.output_property == "DCC_ExeOutput"
        assert project.is_package is False

    def test_package(self, tmp_path: Path) -> None:
        """A .dpk main source builds a .bpl."""
        project = ProjectFile(tmp_path / "MyPkg.dproj", _dproj("MyPkg.dpk"))

        assert project.is_package is True
        assert project.extension == ".bpl"
        assert project.output_property == "DCC_BplOutput"

    @pytest.mark.parametrize(
        "marker",
        [
            "<Borland.ProjectType>Library</Borland.ProjectType>",
            "<Borland.ProjectType>VCLLibrary</Borland.ProjectType>",
            "<AppType>Library</AppType>",
        ],
    )
    def test_library(self, tmp_path: Path, marker: str) -> None:
        """Library markers build a .dll."""
        body = f"  <PropertyGroup>\n    {marker}\n  </PropertyGroup>\n"
        assert ProjectFile(tmp_path / "Lib.dproj", _dproj("Lib.dpr", body)).extension == ".dll"

    def test_unreadable_project(self, tmp_path: Path) -> None:
        """A missing project file reads as empty."""
        project = ProjectFile(tmp_path / "Gone.dproj")

        assert project.content == ""
        assert project.main_source == ""
        assert project.extension == ".exe"
        assert project.main_source_dir() == tmp_path


class TestGetProperty:
    """Tests for get_property."""

    def test_scoped_value(self, tmp_path: Path) -> None:
        """Scoped groups are consulted first."""
        body = (
            "  <PropertyGroup Condition=\"'$(Cfg_2_Win64)'!=''\">\n"
            "    <DCC_ExeOutput>.\\$(Platform)\\$(Config)</DCC_ExeOutput>\n"
            "  </PropertyGroup>\n"
        )
        project = ProjectFile(tmp_path / "MyProj.dproj", _dproj(body=body))

        assert project.get_property("DCC_ExeOutput", "Release", "Win64", {}) == (
            ".\\$(Platform)\\$(Config)"
        )

    def test_imported_optset(self, tmp_path: Path) -> None:
        """Option sets imported by the project supply missing properties."""
        _write(
            tmp_path / "shared" / "Release.optset",
            "<Project><PropertyGroup><DCC_ExeOutput>..\\bin</DCC_ExeOutput></PropertyGroup></Project>",
        )
        body = '  <Import Project="shared\\Release.optset" Condition="\'$(Cfg_2)\'!=\'\'"/>\n'
        project = ProjectFile(tmp_path / "MyProj.dproj", _dproj(body=body))

        assert project.get_property("DCC_ExeOutput", "Release", "Win32", {}) == "..\\bin"

    def test_nested_optset_with_cycle(self, tmp_path: Path) -> None:
        """Nested imports are followed once; cycles terminate."""
        _write(
            tmp_path / "a.optset",
            '<Project><Import Project="b.optset"/></Project>',
        )
        _write(
            tmp_path / "b.optset",
            '<Project><Import Project="a.optset"/>'
            "<PropertyGroup><DCC_ExeOutput>deep</DCC_ExeOutput></PropertyGroup></Project>",
        )
        body = '  <Import Project="$(ProjectDir)a.optset"/>\n'
        project = ProjectFile(tmp_path / "MyProj.dproj", _dproj(body=body))

        assert project.get_property("DCC_ExeOutput", "Debug", "Win32", {}) == "deep"

    def test_cycle_without_value(self, tmp_path: Path) -> None:
        """A cycle with no definition gives ''."""
        _write(tmp_path / "a.optset", '<Project><Import Project="b.optset"/></Project>')
        _write(tmp_path / "b.optset", '<Project><Import Project="a.optset"/></Project>')
        body = '  <Import Project="a.optset"/>\n'
        project = ProjectFile(tmp_path / "MyProj.dproj", _dproj(body=body))

        assert project.get_property("DCC_ExeOutput", "Debug", "Win32", {}) == ""

    def test_missing_optset_ignored(self, tmp_path: Path) -> None:
        """Imports that do not exist are skipped."""
        body = '  <Import Project="missing.optset"/>\n'
        project = ProjectFile(tmp_path / "MyProj.dproj", _dproj(body=body))

        assert project.get_property("DCC_ExeOutput", "Debug", "Win32", {}) == ""


class TestDeployOutput:
    """Tests for deploy_output."""

    def test_matching_configuration(self, tmp_path: Path) -> None:
        """The ProjectOutput entry for the configuration is returned."""
        body = (
            "  <ItemGroup>\n"
            '    <DeployFile LocalName="Win32\\Debug\\MyProj.exe" Configuration="Debug" '
            'Class="ProjectOutput"/>\n'
            '    <DeployFile Class="ProjectOutput" Configuration="Release" '
            'LocalName="Win64\\Release\\MyProj.exe"/>\n'
            '    <DeployFile LocalName="Readme.txt" Configuration="Release" Class="File"/>\n'
            "  </ItemGroup>\n"
        )
        project = ProjectFile(tmp_path / "MyProj.dproj", _dproj(body=body))

        assert project.deploy_output("Release") == "Win64\\Release\\MyProj.exe"
        assert project.deploy_output("debug") == "Win32\\Debug\\MyProj.exe"
        assert project.deploy_output("Profile") == ""


class TestLibSuffix:
    """Tests for lib_suffix."""

    def _package(self, tmp_path: Path, directive: str) -> ProjectFile:
        _write(tmp_path / "MyPkg.dpk", f"package MyPkg;\n\n{directive}\n\nrequires rtl;\nend.\n")
        return ProjectFile(tmp_path / "MyPkg.dproj", _dproj("MyPkg.dpk"))

    def test_explicit_suffix(self, tmp_path: Path) -> None:
        """A quoted suffix is used as written."""
        assert self._package(tmp_path, "{$LIBSUFFIX '290'}").lib_suffix({}) == "290"

    def test_auto_suffix(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """AUTO maps to the IDE version variable."""
        monkeypatch.delenv("DELPHIVERSION", raising=False)
        project = self._package(tmp_path, "{$LIBSUFFIX AUTO}")

        assert project.lib_suffix({"DELPHIVERSION": "290"}) == "290"

    def test_auto_suffix_unresolved(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """AUTO without a known version gives no suffix."""
        monkeypatch.delenv("DELPHIVERSION", raising=False)
        assert self._package(tmp_path, "{$LIBSUFFIX AUTO}").lib_suffix({}) == ""

    def test_no_directive(self, tmp_path: Path) -> None:
        """Packages without the directive have no suffix."""
        assert self._package(tmp_path, "{$R *.res}").lib_suffix({}) == ""

    def test_applications_have_no_suffix(self, tmp_path: Path) -> None:
        """Only packages carry a library suffix."""
        assert ProjectFile(tmp_path / "MyProj.dproj", _dproj()).lib_suffix({}) == ""
