"""Base classes shared by every download strategy."""

import os
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from source_fetcher.config.schema import SettingsConfig
from source_fetcher.core.resource import RefSelector, Resource
from source_fetcher.exceptions import EmptyArchiveError, InvalidCacheError
from source_fetcher.fetch.archive import (
    TAR_TYPES,
    ArchiveType,
    basename_without_params,
    compression_type,
    extname,
    strip_suffix,
)
from source_fetcher.fetch.cache import DownloadCache
from source_fetcher.utils.output import print_detail, print_info, print_warning
from source_fetcher.utils.paths import remove_path
from source_fetcher.utils.system import (
    Arg,
    CommandResult,
    CommandRunner,
    Quiet,
    expand_quiet_args,
    get_runner,
    popen_read,
    quiet_system,
    safe_pipeline,
    safe_system,
)
from source_fetcher.utils.tools import require


class AbstractDownloadStrategy(ABC):
    """Fetches a resource into the cache and stages it for a build.

    Subclasses implement :meth:`fetch`, :meth:`stage` and
    :attr:`cached_location`. Commands go through ``runner`` so that tests can
    record them instead of executing anything.
    """

    def __init__(
        self,
        name: str,
        resource: Resource,
        *,
        settings: Optional[SettingsConfig] = None,
        runner: Optional[CommandRunner] = None,
    ):
        self.name = name
        self.resource = resource
        self.url = resource.url
        self.version = resource.version
        self.meta = resource.specs
        self.settings = settings or SettingsConfig()
        self.runner = runner or get_runner()
        self.cache = DownloadCache(Path(self.settings.cache_dir))

    @abstractmethod
    def fetch(self) -> None:
        """Download the resource into :attr:`cached_location`."""

    @abstractmethod
    def stage(self) -> None:
        """Unpack :attr:`cached_location` into the current working directory."""

    @property
    @abstractmethod
    def cached_location(self) -> Path:
        """Path of the cached file or directory for this resource."""

    def clear_cache(self) -> None:
        """Remove :attr:`cached_location` and any related files from the cache."""
        remove_path(self.cached_location)

    def _tool(self, name: str) -> Path:
        return require(name, self.settings.prefix)

    def _command(self, args: tuple[Arg, ...]) -> list[Arg]:
        """Resolve a bare program name to the executable :meth:`_tool` finds."""
        program, *rest = args
        if isinstance(program, str):
            program = self._tool(program)
        return [program, *rest]

    def _safe_system(self, *args: Arg, cwd: Optional[Path] = None) -> CommandResult:
        return safe_system(self._command(args), runner=self.runner, cwd=cwd)

    def _quiet_safe_system(self, *args: Arg, cwd: Optional[Path] = None) -> CommandResult:
        argv = expand_quiet_args(self._command(args), verbose=self.settings.verbose)
        return safe_system(argv, runner=self.runner, cwd=cwd)

    def _quiet_system(self, *args: Arg, cwd: Optional[Path] = None) -> bool:
        return quiet_system(self._command(args), runner=self.runner, cwd=cwd)

    def _popen_read(self, *args: Arg, cwd: Optional[Path] = None) -> str:
        return popen_read(self._command(args), runner=self.runner, cwd=cwd)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, {self.url!r})"


class AbstractFileDownloadStrategy(AbstractDownloadStrategy):
    """A strategy whose cache entry is a single downloaded file."""

    def stage(self) -> None:
        location = self.cached_location
        archive_type = compression_type(location)

        if archive_type is ArchiveType.ZIP:
            self._quiet_safe_system("unzip", Quiet("-qq"), location)
            self._chdir()
        elif archive_type is ArchiveType.GZIP_ONLY:
            self._buffered_write("gunzip")
        elif archive_type is ArchiveType.BZIP2_ONLY:
            self._buffered_write("bunzip2")
        elif archive_type in TAR_TYPES:
            self._safe_system("tar", "xf", location)
            self._chdir()
        elif archive_type is ArchiveType.XZ:
            self._pipe_to_tar(self._tool("xz"))
            self._chdir()
        elif archive_type is ArchiveType.LZIP:
            self._pipe_to_tar(self._tool("lzip"))
            self._chdir()
        elif archive_type is ArchiveType.XAR:
            self._safe_system(self._tool("xar"), "-xf", location)
        elif archive_type is ArchiveType.RAR:
            self._quiet_safe_system("unrar", "x", Quiet("-inul"), location)
        elif archive_type is ArchiveType.P7ZIP:
            self._safe_system("7zr", "x", location)
        else:
            self._copy_verbatim()

    def _copy_verbatim(self) -> None:
        shutil.copy(self.cached_location, self._basename_without_params())

    def _chdir(self) -> None:
        """Enter the archive's top-level directory when it has exactly one."""
        entries = sorted(p for p in Path.cwd().iterdir() if not p.name.startswith("."))
        if not entries:
            raise EmptyArchiveError(f"Empty archive: {self.cached_location}")
        if len(entries) == 1 and entries[0].is_dir():
            os.chdir(entries[0])

    def _pipe_to_tar(self, tool: Path) -> None:
        safe_pipeline(
            [tool, "-dc", self.cached_location],
            [self._tool("tar"), "xf", "-"],
            runner=self.runner,
            cwd=Path.cwd(),
        )

    def _buffered_write(self, tool: str) -> None:
        # gunzip and bunzip2 write next to their input regardless of the
        # working directory, so send the output to the right place ourselves.
        target = strip_suffix(
            self._basename_without_params(), extname(self.cached_location.name)
        )
        safe_system(
            [self._tool(tool), "-f", self.cached_location, "-c"],
            runner=self.runner,
            output=Path.cwd() / target,
        )

    def _basename_without_params(self) -> str:
        return basename_without_params(self.url)


class VCSDownloadStrategy(AbstractDownloadStrategy):
    """A strategy whose cache entry is a persistent repository checkout.

    The first fetch clones; later fetches update the existing checkout in
    place. A cache directory that is not a valid repository (for example after
    an interrupted clone) is removed and cloned again.
    """

    def __init__(self, name: str, resource: Resource, **kwargs):
        super().__init__(name, resource, **kwargs)
        self.ref = RefSelector.from_specs(self.meta)
        self._clone = self.cache.checkout_path(name, self.cache_tag())

    def fetch(self) -> None:
        print_info(f"Cloning {self.url}")

        if not self.cached_location.exists():
            self._clone_repo()
            return

        try:
            self._check_repo()
        except InvalidCacheError:
            print_warning("Removing invalid repository from cache")
            self.clear_cache()
            self._clone_repo()
        else:
            print_detail(f"Updating {self.cached_location}")
            self._update()

    def stage(self) -> None:
        if self.ref:
            print_info(f"Checking out {self.ref.describe()}")

    @property
    def cached_location(self) -> Path:
        return self._clone

    @property
    def head(self) -> bool:
        return self.version.head

    def cache_tag(self) -> str:
        """Backend name that keeps checkouts of different kinds apart."""
        return "__UNKNOWN__"

    def cache_filename(self) -> str:
        return self.cache.checkout_filename(self.name, self.cache_tag())

    def _repo_valid(self) -> bool:
        return True

    def _check_repo(self) -> None:
        if not self._repo_valid():
            raise InvalidCacheError(f"Not a valid repository: {self.cached_location}")

    @abstractmethod
    def _clone_repo(self) -> None:
        """Create :attr:`cached_location` from scratch."""

    @abstractmethod
    def _update(self) -> None:
        """Bring an existing checkout up to date."""
