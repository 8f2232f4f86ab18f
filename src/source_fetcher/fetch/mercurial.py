"""Mercurial clones."""

from pathlib import Path

from source_fetcher.core.resource import Resource
from source_fetcher.fetch.base import VCSDownloadStrategy


class MercurialDownloadStrategy(VCSDownloadStrategy):
    """Clone a Mercurial repository and archive it, subrepositories included."""

    def __init__(self, name: str, resource: Resource, **kwargs):
        super().__init__(name, resource, **kwargs)
        self.url = self.url.removeprefix("hg://")

    def stage(self) -> None:
        super().stage()

        hg = self._tool("hg")
        args = [hg, "archive", "--subrepos", "-y"]
        if self.ref:
            args += ["-r", self.ref.ref]
        args += ["-t", "files", Path.cwd()]
        self._safe_system(*args, cwd=self.cached_location)

    def cache_tag(self) -> str:
        return "hg"

    def _repo_valid(self) -> bool:
        return (self.cached_location / ".hg").is_dir()

    def _clone_repo(self) -> None:
        self._safe_system(self._tool("hg"), "clone", self.url, self.cached_location)

    def _update(self) -> None:
        self._quiet_safe_system(
            self._tool("hg"), "pull", "--update", cwd=self.cached_location
        )
