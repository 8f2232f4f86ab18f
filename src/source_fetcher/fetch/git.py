"""Git checkouts."""

import re
from pathlib import Path

from source_fetcher.core.resource import RefSelector, Resource
from source_fetcher.fetch.base import VCSDownloadStrategy

# Hosts known to serve shallow clones correctly
SHALLOW_CLONE_ALLOWLIST = (
    re.compile(r"git://"),
    re.compile(r"https://github\.com"),
    re.compile(r"http://git\.sv\.gnu\.org"),
    re.compile(r"http://llvm\.org"),
)

CACHE_VERSION = 0


class GitDownloadStrategy(VCSDownloadStrategy):
    """Clone a git repository and export its working tree.

    Without a ref selector the ``master`` branch is used. Clones are shallow
    when the host allows it and no specific revision has to be resolved.
    """

    def __init__(self, name: str, resource: Resource, **kwargs):
        super().__init__(name, resource, **kwargs)
        self.ref = RefSelector(self.ref.ref_type or "branch", self.ref.ref or "master")
        self.shallow = self.meta.get("shallow", True)

    def stage(self) -> None:
        super().stage()

        dst = Path.cwd()
        self._safe_system(
            "git", "checkout-index", "-a", "-f", f"--prefix={dst}/",
            cwd=self.cached_location,
        )
        if self._has_submodules():
            self._checkout_submodules(dst)

    def cache_tag(self) -> str:
        return "git"

    @property
    def git_dir(self) -> Path:
        return self.cached_location / ".git"

    def shallow_clone(self) -> bool:
        return bool(self.shallow) and self.support_depth()

    def support_depth(self) -> bool:
        # A shallow history can't resolve an arbitrary revision
        if self.ref.ref_type == "revision":
            return False
        return any(rx.search(self.url) for rx in SHALLOW_CLONE_ALLOWLIST)

    def clone_args(self) -> list[str]:
        args = ["clone"]
        if self.shallow_clone():
            args += ["--depth", "1"]
        if self.ref.ref_type in ("branch", "tag"):
            args += ["--branch", self.ref.ref]
        args += [self.url, str(self.cached_location)]
        return args

    def refspec(self) -> str:
        ref_type, ref = self.ref.ref_type, self.ref.ref
        if ref_type == "branch":
            return f"+refs/heads/{ref}:refs/remotes/origin/{ref}"
        if ref_type == "tag":
            return f"+refs/tags/{ref}:refs/tags/{ref}"
        return "+refs/heads/master:refs/remotes/origin/master"

    def reset_args(self) -> list[str]:
        if self.ref.ref_type == "branch":
            target = f"origin/{self.ref.ref}"
        else:
            target = self.ref.ref
        return ["reset", "--hard", target]

    def _repo_valid(self) -> bool:
        return self.git_dir.is_dir() and self._quiet_system(
            "git", "--git-dir", self.git_dir, "status", "-s"
        )

    def _has_ref(self) -> bool:
        return self._quiet_system(
            "git", "--git-dir", self.git_dir, "rev-parse", "-q", "--verify",
            f"{self.ref.ref}^{{commit}}",
        )

    def _has_submodules(self) -> bool:
        return (self.cached_location / ".gitmodules").exists()

    def _clone_repo(self) -> None:
        self._safe_system("git", *self.clone_args())
        self._safe_system(
            "git", "config", "sourcefetcher.cacheversion", str(CACHE_VERSION),
            cwd=self.cached_location,
        )
        if self._has_submodules():
            self._update_submodules()

    def _update(self) -> None:
        cwd = self.cached_location
        self._safe_system("git", "config", "remote.origin.url", self.url, cwd=cwd)
        self._safe_system("git", "config", "remote.origin.fetch", self.refspec(), cwd=cwd)
        if self.ref.ref_type == "branch" or not self._has_ref():
            self._quiet_safe_system("git", "fetch", "origin", cwd=cwd)
        self._quiet_safe_system("git", "checkout", "-f", self.ref.ref, "--", cwd=cwd)
        self._quiet_safe_system("git", *self.reset_args(), cwd=cwd)
        if self._has_submodules():
            self._update_submodules()

    def _update_submodules(self) -> None:
        cwd = self.cached_location
        self._quiet_safe_system("git", "submodule", "sync", "--recursive", cwd=cwd)
        self._quiet_safe_system(
            "git", "submodule", "update", "--init", "--recursive", cwd=cwd
        )

    def _checkout_submodules(self, dst: Path) -> None:
        # $toplevel is absolute; strip the clone path so each submodule lands
        # at its relative location under dst
        escaped_clone_path = str(self.cached_location).replace("/", r"\/")
        sub_cmd = (
            "git checkout-index -a -f "
            f'--prefix="{dst}/${{toplevel/{escaped_clone_path}/}}/$path/"'
        )
        self._quiet_safe_system(
            "git", "submodule", "foreach", "--recursive", sub_cmd,
            cwd=self.cached_location,
        )
