"""Tests for external tool discovery."""

import pytest

from source_fetcher.exceptions import ToolNotFoundError
from source_fetcher.utils.tools import candidate_paths, locate, require


def make_tool(path):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\n")
    path.chmod(0o755)
    return path


@pytest.fixture
def empty_path(tmp_path, monkeypatch):
    """Make PATH contain nothing."""
    empty = tmp_path / "empty"
    empty.mkdir()
    monkeypatch.setenv("PATH", str(empty))
    return empty


class TestCandidatePaths:
    """Test the search order for tools."""

    def test_path_before_prefix(self, tmp_path, monkeypatch):
        """Test PATH wins over the prefix for ordinary tools."""
        on_path = make_tool(tmp_path / "path" / "hg")
        monkeypatch.setenv("PATH", str(on_path.parent))

        assert candidate_paths("hg", "/opt/pfx") == [
            str(on_path),
            "/opt/pfx/bin/hg",
            "/opt/pfx/opt/mercurial/bin/hg",
        ]

    def test_cvs_prefers_system(self, empty_path):
        """Test /usr/bin/cvs is checked first."""
        assert candidate_paths("cvs", "/opt/pfx")[0] == "/usr/bin/cvs"

    def test_xar_ignores_prefix(self, empty_path):
        """Test xar is only looked for in system locations."""
        assert candidate_paths("xar", "/opt/pfx") == ["/usr/bin/xar"]

    def test_package_name_used_for_opt(self, empty_path):
        """Test opt directories are named after the providing package."""
        assert "/opt/pfx/opt/p7zip/bin/7zr" in candidate_paths("7zr", "/opt/pfx")


class TestLocate:
    """Test locating executables."""

    def test_finds_prefix_tool(self, tmp_path, empty_path):
        """Test a tool under <prefix>/bin is found."""
        tool = make_tool(tmp_path / "pfx" / "bin" / "bzr")
        assert locate("bzr", str(tmp_path / "pfx")) == tool

    def test_finds_opt_tool(self, tmp_path, empty_path):
        """Test a tool under <prefix>/opt/<package>/bin is found."""
        tool = make_tool(tmp_path / "pfx" / "opt" / "bazaar" / "bin" / "bzr")
        assert locate("bzr", str(tmp_path / "pfx")) == tool

    def test_ignores_non_executable(self, tmp_path, empty_path):
        """Test files without the executable bit are skipped."""
        tool = tmp_path / "pfx" / "bin" / "fossil"
        tool.parent.mkdir(parents=True)
        tool.write_text("not a program")
        tool.chmod(0o644)
        assert locate("fossil", str(tmp_path / "pfx")) is None

    def test_memoized(self, tmp_path, empty_path):
        """Test lookups are cached for the process."""
        prefix = str(tmp_path / "pfx")
        assert locate("lzip", prefix) is None
        make_tool(tmp_path / "pfx" / "bin" / "lzip")
        assert locate("lzip", prefix) is None

        locate.cache_clear()
        assert locate("lzip", prefix) is not None

    def test_require_missing(self, tmp_path, empty_path):
        """Test require raises for a missing tool."""
        with pytest.raises(ToolNotFoundError, match="unrar"):
            require("unrar", str(tmp_path / "pfx"))
