"""Tests for NuGet XML parsing and manifest classification."""

import logging

from models import RemoteFile
from registry.nuget.parse import parse_xml, is_dependency_file, detect_project_name


class TestParseXml:
    """Test safe XML parsing."""

    def test_parses_well_formed_document(self):
        """Test a well-formed document yields its root element."""
        root = parse_xml('<?xml version="1.0" encoding="utf-8"?><packages><package id="A"/></packages>')

        assert root is not None
        assert root.tag == "packages"

    def test_malformed_returns_none(self):
        """Test malformed input yields None instead of raising."""
        assert parse_xml("<not valid") is None

    def test_empty_and_none_return_none(self):
        """Test empty and missing text are treated as unparseable."""
        assert parse_xml("") is None
        assert parse_xml(None) is None

    def test_logs_parse_failure(self, caplog):
        """Test parse failures are reported as warnings."""
        with caplog.at_level(logging.WARNING, logger="registry.nuget.parse"):
            parse_xml("<Project><ItemGroup></Project>")

        assert any("Couldn't parse XML" in r.getMessage() for r in caplog.records)

    def test_strips_default_namespace(self):
        """Test legacy MSBuild namespaces are removed from tags."""
        root = parse_xml(
            '<Project xmlns="http://schemas.microsoft.com/developer/msbuild/2003">'
            '<ItemGroup><PackageReference Include="Serilog"/></ItemGroup></Project>'
        )

        assert root.tag == "Project"
        assert root.find("ItemGroup/PackageReference").get("Include") == "Serilog"

    def test_tolerates_byte_order_mark(self):
        """Test a leading UTF-8 BOM does not break parsing."""
        root = parse_xml("\ufeff<packages/>")

        assert root is not None
        assert root.tag == "packages"


class TestIsDependencyFile:
    """Test manifest classification."""

    def test_csproj_and_packages_config(self):
        """Test both manifest kinds are recognized."""
        assert is_dependency_file({"name": "App.csproj"})
        assert is_dependency_file({"name": "packages.config"})

    def test_other_files(self):
        """Test unrelated files are rejected."""
        assert not is_dependency_file({"name": "readme.md"})
        assert not is_dependency_file({"name": "my.packages.config"})

    def test_csproj_is_substring_match(self):
        """Test '.csproj' anywhere in the name qualifies, not only as a suffix."""
        assert is_dependency_file({"name": "foo.csproj.bak"})

    def test_accepts_objects_with_name(self):
        """Test objects exposing a name attribute are accepted."""
        assert is_dependency_file(RemoteFile(name="Web.csproj", path="src/Web/Web.csproj"))


class TestDetectProjectName:
    """Test project name detection."""

    def test_strips_extension(self):
        """Test the .csproj extension is removed."""
        assert detect_project_name({"name": "Foo.csproj"}) == "Foo"

    def test_only_first_occurrence_removed(self):
        """Test only the first '.csproj' occurrence is removed."""
        assert detect_project_name({"name": "Foo.csproj.csproj"}) == "Foo.csproj"
        assert detect_project_name({"name": "foo.csproj.bak"}) == "foo.bak"

    def test_non_project_file(self):
        """Test files without '.csproj' have no project name."""
        assert detect_project_name({"name": "readme.md"}) is None
        assert detect_project_name({"name": "packages.config"}) is None


class TestParseXmlUnencodable:
    """Test text that cannot be handed to the XML parser."""

    def test_lone_surrogate_returns_none(self):
        """Test a lone surrogate is reported as a parse failure."""
        assert parse_xml('<packages><package id="\ud800"/></packages>') is None

    def test_dependencies_stats_does_not_raise(self):
        """Test the single-file entry point stays empty on such text."""
        from registry.nuget.extract import dependencies_stats

        assert dependencies_stats({"name": "packages.config", "text": '<packages id="\ud800"/>'}) == []
