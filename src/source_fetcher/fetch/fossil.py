"""Fossil clones."""

from pathlib import Path

from source_fetcher.core.resource import Resource
from source_fetcher.fetch.base import VCSDownloadStrategy


class FossilDownloadStrategy(VCSDownloadStrategy):
    """Clone a Fossil repository file and open it in the staging directory."""

    def __init__(self, name: str, resource: Resource, **kwargs):
        super().__init__(name, resource, **kwargs)
        self.url = self.url.removeprefix("fossil://")

    def stage(self) -> None:
        super().stage()
        args = [self._tool("fossil"), "open", self.cached_location]
        if self.ref:
            args.append(self.ref.ref)
        self._safe_system(*args, cwd=Path.cwd())

    def cache_tag(self) -> str:
        return "fossil"

    def _clone_repo(self) -> None:
        self._safe_system(self._tool("fossil"), "clone", self.url, self.cached_location)

    def _update(self) -> None:
        self._safe_system(self._tool("fossil"), "pull", "-R", self.cached_location)
