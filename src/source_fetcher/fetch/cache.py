"""Cache paths for downloaded files and repository checkouts."""

from pathlib import Path

from source_fetcher.utils.paths import ensure_dir, expand_path, remove_path


class DownloadCache:
    """Deterministic locations of cache entries under a single root.

    Downloaded files live at ``<root>/<name>-<version><ext>``; repository
    checkouts at ``<root>/<name>--<tag>``, where the tag names the backend
    (``git``, ``svn-HEAD``, ...) so different backends for the same resource
    never share a directory. Nothing here touches the network.
    """

    PARTIAL_SUFFIX = ".incomplete"

    def __init__(self, cache_dir: Path):
        """Initialize the cache.

        Args:
            cache_dir: Root directory for the cache (e.g., ~/.cache/source-fetcher)
        """
        self.cache_dir = expand_path(str(cache_dir))
        ensure_dir(self.cache_dir)

    def file_path(self, name: str, version: str, ext: str = "") -> Path:
        """Location of a downloaded file."""
        return self.cache_dir / f"{name}-{version}{ext}"

    @staticmethod
    def checkout_filename(name: str, tag: str) -> str:
        """Directory name of a checkout, relative to the cache root."""
        return f"{name}--{tag}"

    def checkout_path(self, name: str, tag: str) -> Path:
        """Location of a repository checkout."""
        return self.cache_dir / self.checkout_filename(name, tag)

    @classmethod
    def partial_path(cls, location: Path) -> Path:
        """Sibling path holding an in-progress download of ``location``."""
        return location.with_name(location.name + cls.PARTIAL_SUFFIX)

    def entries(self) -> list[Path]:
        """All entries currently in the cache, sorted by name."""
        if not self.cache_dir.exists():
            return []
        return sorted(self.cache_dir.iterdir())

    def clear(self, location: Path) -> None:
        """Remove one cache entry together with its partial download."""
        remove_path(location)
        remove_path(self.partial_path(location))

    def clear_all(self) -> None:
        """Remove every entry in the cache."""
        for entry in self.entries():
            remove_path(entry)
