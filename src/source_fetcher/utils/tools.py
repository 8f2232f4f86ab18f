"""Discovery of external programs used for fetching and unpacking."""

import os
import shutil
from functools import lru_cache
from pathlib import Path
from typing import Optional

from source_fetcher.exceptions import ToolNotFoundError

# Package that provides a tool when it is not on PATH, used to build
# <prefix>/opt/<package>/bin/<tool> candidates.
TOOL_PACKAGES = {
    "svn": "subversion",
    "gunzip": "gzip",
    "bunzip2": "bzip2",
    "hg": "mercurial",
    "bzr": "bazaar",
    "cvs": "cvs",
    "fossil": "fossil",
    "xz": "xz",
    "lzip": "lzip",
    "unrar": "unrar",
    "7zr": "p7zip",
}


def candidate_paths(name: str, prefix: str) -> list[str]:
    """Return the ordered list of places to look for ``name``."""
    package = TOOL_PACKAGES.get(name, name)
    on_path = shutil.which(name)
    prefixed = [
        f"{prefix}/bin/{name}",
        f"{prefix}/opt/{package}/bin/{name}",
    ]

    if name == "cvs":
        candidates = ["/usr/bin/cvs", *prefixed, on_path]
    elif name == "xar":
        candidates = ["/usr/bin/xar", on_path]
    else:
        candidates = [on_path, *prefixed]
    return [c for c in candidates if c]


@lru_cache(maxsize=None)
def locate(name: str, prefix: str = "/usr/local") -> Optional[Path]:
    """Find an executable for ``name``.

    Results are memoized per process.

    Args:
        name: Tool name, e.g. ``hg``
        prefix: Installation prefix searched after PATH

    Returns:
        Path to the first executable candidate, or None
    """
    for candidate in candidate_paths(name, prefix):
        if os.path.isfile(candidate) and os.access(candidate, os.X_OK):
            return Path(candidate)
    return None


def require(name: str, prefix: str = "/usr/local") -> Path:
    """Like :func:`locate`, but raise when the tool is missing.

    Raises:
        ToolNotFoundError: If no executable candidate exists
    """
    path = locate(name, prefix)
    if path is None:
        raise ToolNotFoundError(f"Could not find '{name}'; install it or add it to PATH")
    return path
