"""Tests for resource descriptors."""

from source_fetcher.core.resource import RefSelector, Resource, Version


class TestVersion:
    """Test version parsing."""

    def test_plain_version(self):
        """Test ordinary versions are kept as-is."""
        version = Version.parse("1.2.3")
        assert str(version) == "1.2.3"
        assert not version.head

    def test_head(self):
        """Test HEAD marks a development version."""
        assert Version.parse("HEAD").head
        assert Version.parse("head").head
        assert str(Version.parse("head")) == "HEAD"

    def test_empty(self):
        """Test a missing version is empty."""
        assert str(Version.parse(None)) == ""


class TestResource:
    """Test Resource construction."""

    def test_string_version_parsed(self):
        """Test a string version is converted to a Version."""
        resource = Resource(name="foo", url="https://example.com/foo.tgz", version="HEAD")
        assert isinstance(resource.version, Version)
        assert resource.version.head

    def test_defaults(self):
        """Test optional fields default to empty values."""
        resource = Resource(name="foo", url="https://example.com/foo.tgz")
        assert resource.specs == {}
        assert resource.mirrors == []
        assert resource.using is None


class TestRefSelector:
    """Test ref selection from specs."""

    def test_from_specs(self):
        """Test the ref key present in specs is picked."""
        ref = RefSelector.from_specs({"tag": "v1.0", "user": "bob"})
        assert (ref.ref_type, ref.ref) == ("tag", "v1.0")
        assert ref.describe() == "tag v1.0"

    def test_empty(self):
        """Test no ref key gives a falsy selector."""
        ref = RefSelector.from_specs({"shallow": False})
        assert ref.ref_type is None
        assert not ref

    def test_revisions(self):
        """Test revisions maps are carried through."""
        ref = RefSelector.from_specs({"revisions": {"trunk": "10"}})
        assert ref.ref == {"trunk": "10"}
        assert ref
