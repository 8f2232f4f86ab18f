"""Tests for the Subversion download strategies."""

import pytest

from source_fetcher.exceptions import ToolNotFoundError
from source_fetcher.fetch.subversion import (
    SubversionDownloadStrategy,
    UnsafeSubversionDownloadStrategy,
)

URL = "http://svn.example.org/foo/trunk"


@pytest.fixture
def svn(settings, runner, make_resource):
    """Build a SubversionDownloadStrategy for a URL."""

    def _make(url=URL, version="HEAD", cls=SubversionDownloadStrategy, **specs):
        resource = make_resource(url, version=version, **specs)
        return cls("foo", resource, settings=settings, runner=runner)

    return _make


def make_working_copy(strategy):
    (strategy.cached_location / ".svn").mkdir(parents=True)


class TestSubversionBasics:
    """Test URL handling and cache tags."""

    def test_svn_http_prefix_stripped(self, svn):
        """Test svn+http:// URLs are fetched over plain http."""
        assert svn("svn+http://svn.example.org/foo/trunk").url == URL

    def test_head_cache_tag(self, svn):
        """Test HEAD checkouts are cached apart from pinned ones."""
        assert svn().cached_location.name == "foo--svn-HEAD"
        assert svn(version="1.0").cached_location.name == "foo--svn"

    def test_repo_url_parsed_from_info(self, svn, runner):
        """Test the working copy URL is read from svn info."""
        runner.on("svn", "info", stdout=f"Path: .\nURL: {URL}\nRevision: 42\n")
        assert svn().repo_url() == URL

    def test_externals_parsed(self, svn, runner):
        """Test svn:externals lines are split into name and URL."""
        runner.on(
            "svn", "propget",
            stdout="libbar http://svn.example.org/bar/trunk\n\nlibbaz http://svn.example.org/baz\n",
        )
        assert list(svn().externals()) == [
            ("libbar", "http://svn.example.org/bar/trunk"),
            ("libbaz", "http://svn.example.org/baz"),
        ]


class TestSubversionFetch:
    """Test checkout, update and switch behaviour."""

    def test_first_fetch_checks_out(self, svn, runner):
        """Test a missing working copy is checked out."""
        strategy = svn()
        strategy.fetch()
        assert runner.commands == [
            ["svn", "checkout", "-q", "--force", URL, str(strategy.cached_location)],
        ]

    def test_revision_checkout(self, svn, runner):
        """Test a pinned revision is passed with -r."""
        strategy = svn(revision="123")
        strategy.fetch()
        assert runner.commands[-1][-2:] == ["-r", "123"]

    def test_revisions_pin_externals(self, svn, runner):
        """Test trunk and each external are fetched at their own revision."""
        strategy = svn(revisions={"trunk": "100", "libbar": "7"})
        runner.on("svn", "propget", stdout="libbar http://svn.example.org/bar/trunk\n")
        location = strategy.cached_location

        strategy.fetch()

        checkouts = runner.find("svn", "checkout")
        assert [c.argv for c in checkouts] == [
            ["svn", "checkout", "-q", "--force", URL, str(location),
             "-r", "100", "--ignore-externals"],
            ["svn", "checkout", "-q", "--force", "http://svn.example.org/bar/trunk",
             str(location / "libbar"), "-r", "7", "--ignore-externals"],
        ]

    def test_same_url_updates(self, svn, runner):
        """Test an existing working copy of the same URL is updated."""
        strategy = svn()
        make_working_copy(strategy)
        runner.on("svn", "info", stdout=f"URL: {URL}\n")

        strategy.fetch()

        assert not runner.find("svn", "switch")
        assert runner.find("svn", "up", "-q", "--force", str(strategy.cached_location))

    def test_changed_url_switches(self, svn, runner):
        """Test a working copy of another URL is switched in place."""
        strategy = svn()
        make_working_copy(strategy)
        runner.on("svn", "info", stdout="URL: http://svn.example.org/foo/branches/old\n")

        strategy.fetch()

        assert runner.find("svn", "switch", URL, str(strategy.cached_location))
        assert runner.find("svn", "up")

    def test_failed_switch_clears_cache(self, svn, runner):
        """Test a working copy that can't be switched is checked out again."""
        strategy = svn()
        make_working_copy(strategy)
        runner.on("svn", "info", stdout="URL: http://svn.example.org/other\n")
        runner.on("svn", "switch", returncode=1)

        strategy.fetch()

        assert not strategy.cached_location.exists()
        assert runner.find("svn", "checkout")

    def test_invalid_working_copy_recloned(self, svn, runner):
        """Test a cache entry without .svn is checked out again."""
        strategy = svn()
        strategy.cached_location.mkdir(parents=True)
        runner.on("svn", "info", stdout=f"URL: {URL}\n")

        strategy.fetch()

        assert runner.find("svn", "checkout")
        assert not runner.find("svn", "up")


class TestSubversionStage:
    """Test exporting the working copy."""

    def test_stage_exports(self, svn, runner, stage_dir):
        """Test the working copy is exported into the working directory."""
        strategy = svn()
        strategy.stage()
        assert runner.commands == [
            ["svn", "export", "-q", "--force", str(strategy.cached_location), str(stage_dir)],
        ]


class TestUnsafeSubversion:
    """Test the certificate-trusting variant."""

    def test_checkout_trusts_server(self, svn, runner):
        """Test non-interactive trust flags are added to checkouts."""
        strategy = svn(cls=UnsafeSubversionDownloadStrategy)
        strategy.fetch()
        assert runner.commands == [
            ["svn", "checkout", "-q", "--non-interactive", "--trust-server-cert",
             "--force", URL, str(strategy.cached_location)],
        ]


class TestSubversionMissingTool:
    """Test behaviour when svn is not installed."""

    def test_fetch_raises_tool_not_found(self, bare_settings, runner, make_resource):
        """Test a missing svn is reported before anything runs."""
        strategy = SubversionDownloadStrategy(
            "foo", make_resource(URL), settings=bare_settings, runner=runner
        )

        with pytest.raises(ToolNotFoundError, match="svn"):
            strategy.fetch()
        assert runner.calls == []

    def test_existing_checkout_raises_tool_not_found(self, bare_settings, runner, make_resource):
        """Test the URL check on a cached working copy needs svn as well."""
        strategy = SubversionDownloadStrategy(
            "foo", make_resource(URL), settings=bare_settings, runner=runner
        )
        make_working_copy(strategy)

        with pytest.raises(ToolNotFoundError):
            strategy.fetch()
        assert runner.calls == []
