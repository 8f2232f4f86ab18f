"""Tests for configuration schema models."""

import pytest
from pydantic import ValidationError

from source_fetcher.config.schema import (
    ResourceConfig,
    SettingsConfig,
    SourceFetcherConfig,
)


class TestSettingsConfig:
    """Test SettingsConfig model."""

    def test_defaults(self):
        """Test default settings."""
        settings = SettingsConfig()
        assert settings.cache_dir == "~/.cache/source-fetcher"
        assert settings.prefix == "/usr/local"
        assert settings.verbose is False
        assert settings.bottle_mirror is None
        assert settings.download_timeout == 60.0

    def test_timeout_must_be_positive(self):
        """Test a zero timeout is rejected."""
        with pytest.raises(ValidationError):
            SettingsConfig(download_timeout=0)


class TestResourceConfig:
    """Test ResourceConfig model."""

    def test_minimal(self):
        """Test a resource with only a name and URL."""
        resource = ResourceConfig(name="foo", url="https://example.com/foo.tar.gz")
        assert resource.version == ""
        assert resource.mirrors == []
        assert resource.specs() == {}

    @pytest.mark.parametrize("name", ["", "a/b", ".", ".."])
    def test_invalid_names(self, name):
        """Test names that would escape the cache are rejected."""
        with pytest.raises(ValidationError):
            ResourceConfig(name=name, url="https://example.com/x")

    def test_single_ref_only(self):
        """Test two ref selectors at once are rejected."""
        with pytest.raises(ValidationError, match="Only one of"):
            ResourceConfig(name="foo", url="git://x", branch="main", tag="v1")

    def test_specs(self):
        """Test unset options are left out of specs."""
        resource = ResourceConfig(
            name="foo",
            url="https://github.com/example/foo.git",
            tag="v1.0",
            user="bob:secret",
            shallow=False,
        )
        assert resource.specs() == {"tag": "v1.0", "user": "bob:secret", "shallow": False}

    def test_to_resource(self):
        """Test conversion to the descriptor strategies consume."""
        resource = ResourceConfig(
            name="foo",
            url="https://example.com/foo-1.0.tar.gz",
            version="HEAD",
            using="nounzip",
            mirrors=["https://mirror.example.org/foo-1.0.tar.gz"],
        ).to_resource()

        assert resource.name == "foo"
        assert resource.version.head
        assert resource.using == "nounzip"
        assert resource.mirrors == ["https://mirror.example.org/foo-1.0.tar.gz"]

    def test_revisions(self):
        """Test revisions maps are accepted."""
        resource = ResourceConfig(
            name="foo", url="svn://x", revisions={"trunk": "10", "ext": "3"}
        )
        assert resource.to_resource().specs["revisions"] == {"trunk": "10", "ext": "3"}


class TestSourceFetcherConfig:
    """Test the root configuration model."""

    def test_minimal(self):
        """Test a config with only a version."""
        config = SourceFetcherConfig(version="1.0")
        assert config.resources == []
        assert isinstance(config.settings, SettingsConfig)

    def test_unsupported_version(self):
        """Test only 1.x configs are accepted."""
        with pytest.raises(ValidationError, match="Unsupported config version"):
            SourceFetcherConfig(version="2.0")

    def test_duplicate_names(self):
        """Test resource names must be unique."""
        with pytest.raises(ValidationError, match="Duplicate resource name"):
            SourceFetcherConfig(
                version="1.0",
                resources=[
                    {"name": "foo", "url": "https://example.com/a"},
                    {"name": "foo", "url": "https://example.com/b"},
                ],
            )

    def test_get_resource(self):
        """Test looking up resources by name."""
        config = SourceFetcherConfig(
            version="1.0",
            resources=[{"name": "foo", "url": "https://example.com/a"}],
        )
        assert config.get_resource("foo").url == "https://example.com/a"
        assert config.get_resource("bar") is None
