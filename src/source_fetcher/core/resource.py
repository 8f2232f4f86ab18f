"""Resource descriptors consumed by download strategies."""

from dataclasses import dataclass, field
from typing import Any, Optional, Union

# Ref selector keys, in lookup order
REF_TYPES = ("branch", "revision", "revisions", "tag")

HEAD_VERSIONS = ("HEAD", "head")


@dataclass(frozen=True)
class Version:
    """A resource version; ``head`` marks an unpinned development version."""

    value: str = ""
    head: bool = False

    @classmethod
    def parse(cls, value: Optional[str]) -> "Version":
        """Create a version from a string, recognising ``HEAD``."""
        value = (value or "").strip()
        if value in HEAD_VERSIONS:
            return cls(value="HEAD", head=True)
        return cls(value=value)

    def __str__(self) -> str:
        return self.value


@dataclass
class Resource:
    """A downloadable resource as declared by its owner.

    Attributes:
        name: Resource name, part of every cache path
        url: Primary download or repository URL
        version: Declared version
        specs: Ref selector and strategy options (user, module, shallow, ...)
        mirrors: Fallback URLs tried in order after ``url`` fails
        using: Optional explicit strategy (token or strategy class)
    """

    name: str
    url: str
    version: Version = field(default_factory=Version)
    specs: dict[str, Any] = field(default_factory=dict)
    mirrors: list[str] = field(default_factory=list)
    using: Optional[Any] = None

    def __post_init__(self):
        if isinstance(self.version, str):
            self.version = Version.parse(self.version)


RefValue = Union[str, dict[str, str], None]


@dataclass(frozen=True)
class RefSelector:
    """The version-control state to retrieve.

    ``ref_type`` is one of :data:`REF_TYPES`, or None for the default
    branch/tip. For ``revisions`` the ref maps external names (and ``trunk``)
    to revisions.
    """

    ref_type: Optional[str] = None
    ref: RefValue = None

    @classmethod
    def from_specs(cls, specs: dict[str, Any]) -> "RefSelector":
        """Pick the first ref key present in ``specs``."""
        for key in REF_TYPES:
            if key in specs:
                return cls(ref_type=key, ref=specs[key])
        return cls()

    def __bool__(self) -> bool:
        return self.ref_type is not None and self.ref is not None

    def describe(self) -> str:
        return f"{self.ref_type} {self.ref}"
