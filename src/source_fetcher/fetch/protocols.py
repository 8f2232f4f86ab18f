"""Interface shared by all download strategies."""

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class DownloadStrategy(Protocol):
    """Fetch a resource into the local cache and stage it for a build."""

    @property
    def cached_location(self) -> Path:
        """Path of the cache entry, valid before anything has been fetched."""
        ...

    def fetch(self) -> None:
        """Populate or refresh the cache entry.

        Safe to call when the resource is already cached.

        Raises:
            DownloadError: If an HTTP download fails on every mirror
            ErrorDuringExecution: If an external tool fails
        """
        ...

    def stage(self) -> None:
        """Materialize the cache entry into the current working directory.

        Assumes :meth:`fetch` has succeeded.

        Raises:
            EmptyArchiveError: If an archive extracts to nothing
            ErrorDuringExecution: If an external tool fails
        """
        ...

    def clear_cache(self) -> None:
        """Remove the cache entry and any related side files."""
        ...
