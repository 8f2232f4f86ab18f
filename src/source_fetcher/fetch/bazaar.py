"""Bazaar lightweight checkouts."""

from pathlib import Path

from source_fetcher.core.resource import Resource
from source_fetcher.fetch.base import VCSDownloadStrategy
from source_fetcher.utils.paths import copy_tree_contents, remove_path


class BazaarDownloadStrategy(VCSDownloadStrategy):
    """Keep a history-less Bazaar checkout and copy its tree when staging."""

    def __init__(self, name: str, resource: Resource, **kwargs):
        super().__init__(name, resource, **kwargs)
        self.url = self.url.removeprefix("bzr://")

    def stage(self) -> None:
        # bzr export doesn't work on lightweight checkouts
        dst = Path.cwd()
        copy_tree_contents(self.cached_location, dst)
        remove_path(dst / ".bzr")

    def cache_tag(self) -> str:
        return "bzr"

    def _repo_valid(self) -> bool:
        return (self.cached_location / ".bzr").is_dir()

    def _clone_repo(self) -> None:
        self._safe_system(
            self._tool("bzr"), "checkout", "--lightweight", self.url, self.cached_location
        )

    def _update(self) -> None:
        self._quiet_safe_system(self._tool("bzr"), "update", cwd=self.cached_location)
