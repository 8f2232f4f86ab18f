"""Pydantic models for source fetcher configuration."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from source_fetcher.core.resource import REF_TYPES, Resource, Version


class SettingsConfig(BaseModel):
    """Global settings shared by every download strategy."""

    cache_dir: str = Field(
        default="~/.cache/source-fetcher",
        description="Root directory for downloaded files and checkouts",
    )
    prefix: str = Field(
        default="/usr/local",
        description="Installation prefix searched for external tools",
    )
    verbose: bool = Field(
        default=False, description="Show output from external tools"
    )
    bottle_mirror: Optional[str] = Field(
        default=None,
        description="Mirror passed as use_mirror=<value> on bottle downloads",
    )
    download_timeout: float = Field(
        default=60.0, gt=0, description="Read timeout for HTTP downloads in seconds"
    )


class ResourceConfig(BaseModel):
    """A resource declared in configuration."""

    name: str = Field(description="Resource name, used for cache paths")
    url: str = Field(description="Download or repository URL")
    version: str = Field(default="", description="Version string, or HEAD")
    using: Optional[str] = Field(
        default=None,
        description="Explicit strategy: a token (git, svn, post, ...) or a strategy class name",
    )
    branch: Optional[str] = None
    tag: Optional[str] = None
    revision: Optional[str] = None
    revisions: Optional[dict[str, str]] = None
    user: Optional[str] = Field(
        default=None, description="Credentials passed through to the server"
    )
    module: Optional[str] = Field(default=None, description="CVS module name")
    shallow: Optional[bool] = Field(
        default=None, description="Allow shallow git clones (default true)"
    )
    mirrors: list[str] = Field(default_factory=list, description="Fallback URLs")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Reject names that would escape the cache directory."""
        if not v or "/" in v or v in (".", ".."):
            raise ValueError(f"Invalid resource name: {v!r}")
        return v

    @model_validator(mode="after")
    def validate_single_ref(self) -> "ResourceConfig":
        """Validate that at most one ref selector is set."""
        present = [key for key in REF_TYPES if getattr(self, key) is not None]
        if len(present) > 1:
            raise ValueError(
                f"Only one of {', '.join(REF_TYPES)} may be set (got {', '.join(present)})"
            )
        return self

    def specs(self) -> dict:
        """Strategy-specific options in the shape strategies expect."""
        keys = (*REF_TYPES, "user", "module", "shallow")
        return {key: getattr(self, key) for key in keys if getattr(self, key) is not None}

    def to_resource(self) -> Resource:
        """Build the descriptor handed to download strategies."""
        return Resource(
            name=self.name,
            url=self.url,
            version=Version.parse(self.version),
            specs=self.specs(),
            mirrors=list(self.mirrors),
            using=self.using,
        )


class SourceFetcherConfig(BaseModel):
    """Root configuration for source fetcher."""

    version: str = Field(description="Config schema version")
    settings: SettingsConfig = Field(default_factory=SettingsConfig)
    resources: list[ResourceConfig] = Field(
        default_factory=list, description="Declared resources"
    )

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        """Validate version format."""
        if not v.startswith("1."):
            raise ValueError(
                f"Unsupported config version: {v}. Only version 1.x is supported."
            )
        return v

    @field_validator("resources")
    @classmethod
    def validate_unique_names(cls, v: list[ResourceConfig]) -> list[ResourceConfig]:
        """Validate that resource names are unique."""
        seen = set()
        for resource in v:
            if resource.name in seen:
                raise ValueError(f"Duplicate resource name: {resource.name}")
            seen.add(resource.name)
        return v

    def get_resource(self, name: str) -> Optional[ResourceConfig]:
        """Look up a declared resource by name."""
        for resource in self.resources:
            if resource.name == name:
                return resource
        return None
