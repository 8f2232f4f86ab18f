"""Error types raised while fetching and staging resources."""

from typing import Optional, Sequence


class SourceFetcherError(Exception):
    """Base class for all source fetcher errors."""

    code: str = "UNKNOWN"


class ConfigurationError(SourceFetcherError):
    """A requested download strategy could not be resolved."""

    code = "CONFIGURATION_ERROR"


class DownloadError(SourceFetcherError):
    """A download failed after all retries and mirrors were exhausted."""

    code = "DOWNLOAD_ERROR"

    def __init__(self, url: str, message: Optional[str] = None):
        self.url = url
        super().__init__(message or f"Download failed: {url}")


class EmptyArchiveError(SourceFetcherError):
    """An archive extracted to nothing."""

    code = "EMPTY_ARCHIVE"


class InvalidCacheError(SourceFetcherError):
    """A cached checkout is not a usable repository.

    Only raised and handled inside VCS strategies; a fetch recovers from it by
    clearing the cache entry and cloning again.
    """

    code = "INVALID_CACHE"


class ToolNotFoundError(SourceFetcherError):
    """A required external program could not be located."""

    code = "TOOL_NOT_FOUND"


class ErrorDuringExecution(SourceFetcherError):
    """An external command exited with a non-zero status."""

    code = "EXECUTION_ERROR"

    def __init__(self, command: Sequence[str], returncode: int, stderr: str = ""):
        self.command = [str(arg) for arg in command]
        self.returncode = returncode
        self.stderr = stderr
        message = f"Failure while executing: {' '.join(self.command)} (exit {returncode})"
        if stderr:
            message = f"{message}\n{stderr.strip()[:500]}"
        super().__init__(message)
