"""Subversion checkouts."""

import re
from pathlib import Path
from typing import Iterator, Optional

from source_fetcher.core.resource import Resource
from source_fetcher.fetch.base import VCSDownloadStrategy

REPO_URL_RX = re.compile(r"^URL: (.+)$", re.MULTILINE)


class SubversionDownloadStrategy(VCSDownloadStrategy):
    """Check out a Subversion repository and export it.

    With a ``revisions`` selector, ``revisions["trunk"]`` pins the main
    checkout and every other key pins the ``svn:externals`` entry of that
    name, each fetched as its own nested checkout.
    """

    def __init__(self, name: str, resource: Resource, **kwargs):
        super().__init__(name, resource, **kwargs)
        if self.url.startswith("svn+http://"):
            self.url = self.url[len("svn+"):]

    def fetch(self) -> None:
        if self.cached_location.exists() and self.url.removesuffix("/") != self.repo_url():
            if not self._quiet_system("svn", "switch", self.url, self.cached_location):
                self.clear_cache()
        super().fetch()

    def stage(self) -> None:
        super().stage()
        self._quiet_safe_system(
            "svn", "export", "--force", self.cached_location, Path.cwd()
        )

    def cache_tag(self) -> str:
        return "svn-HEAD" if self.head else "svn"

    def repo_url(self) -> Optional[str]:
        """URL the cached working copy was checked out from."""
        info = self._popen_read("svn", "info", self.cached_location)
        match = REPO_URL_RX.search(info)
        return match.group(1).strip() if match else None

    def externals(self) -> Iterator[tuple[str, str]]:
        """Yield ``(name, url)`` for each ``svn:externals`` entry of the URL."""
        output = self._popen_read("svn", "propget", "svn:externals", self.url)
        for line in output.splitlines():
            parts = line.split()
            if len(parts) >= 2:
                yield parts[0], parts[1]

    def fetch_args(self) -> list[str]:
        return []

    def fetch_repo(
        self,
        target: Path,
        url: str,
        revision: Optional[str] = None,
        ignore_externals: bool = False,
    ) -> None:
        # "svn up" on an existing working copy saves bandwidth and also
        # verifies the cache by moving it to the requested revision
        exists = target.is_dir()
        args = ["svn", "up" if exists else "checkout", *self.fetch_args(), "--force"]
        if not exists:
            args.append(url)
        args.append(target)
        if revision:
            args += ["-r", revision]
        if ignore_externals:
            args.append("--ignore-externals")
        self._quiet_safe_system(*args)

    def _repo_valid(self) -> bool:
        return (self.cached_location / ".svn").is_dir()

    def _clone_repo(self) -> None:
        ref_type, ref = self.ref.ref_type, self.ref.ref
        if ref_type == "revision":
            self.fetch_repo(self.cached_location, self.url, ref)
        elif ref_type == "revisions":
            # No trunk revision means the latest one
            self.fetch_repo(self.cached_location, self.url, ref.get("trunk"), True)
            for external_name, external_url in self.externals():
                self.fetch_repo(
                    self.cached_location / external_name,
                    external_url,
                    ref.get(external_name),
                    True,
                )
        else:
            self.fetch_repo(self.cached_location, self.url)

    def _update(self) -> None:
        self._clone_repo()


class UnsafeSubversionDownloadStrategy(SubversionDownloadStrategy):
    """Subversion without interactive prompts, trusting the server certificate.

    Deprecated.
    """

    def fetch_args(self) -> list[str]:
        return ["--non-interactive", "--trust-server-cert"]
