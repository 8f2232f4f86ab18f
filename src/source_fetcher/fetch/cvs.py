"""CVS checkouts."""

import re
from pathlib import Path

from source_fetcher.core.resource import Resource
from source_fetcher.fetch.base import VCSDownloadStrategy
from source_fetcher.utils.paths import copy_tree_contents
from source_fetcher.utils.system import Quiet

TRAILING_MODULE_RX = re.compile(r":[^/]+$")


def split_url(url: str) -> tuple[str, str]:
    """Split ``:pserver:host:/root:module`` into ``(module, cvsroot)``."""
    cvsroot, _, module = url.rpartition(":")
    return module, cvsroot


class CVSDownloadStrategy(VCSDownloadStrategy):
    """Check out a CVS module.

    The module is ``specs["module"]`` when given, otherwise a trailing
    ``:module`` on the URL, otherwise the resource name.
    """

    def __init__(self, name: str, resource: Resource, **kwargs):
        super().__init__(name, resource, **kwargs)
        self.url = self.url.removeprefix("cvs://")

        if "module" in self.meta:
            self.module = self.meta["module"]
        elif not TRAILING_MODULE_RX.search(self.url):
            self.module = name
        else:
            self.module, self.url = split_url(self.url)

    def stage(self) -> None:
        copy_tree_contents(self.cached_location, Path.cwd())

    def cache_tag(self) -> str:
        return "cvs"

    def _repo_valid(self) -> bool:
        return (self.cached_location / "CVS").is_dir()

    def _clone_repo(self) -> None:
        cvs = self._tool("cvs")
        root = self.cache.cache_dir
        self._quiet_safe_system(cvs, Quiet("-Q"), "-d", self.url, "login", cwd=root)
        self._quiet_safe_system(
            cvs, Quiet("-Q"), "-d", self.url,
            "checkout", "-d", self.cache_filename(), self.module,
            cwd=root,
        )

    def _update(self) -> None:
        self._quiet_safe_system(
            self._tool("cvs"), Quiet("-Q"), "up", cwd=self.cached_location
        )
