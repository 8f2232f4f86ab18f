"""Path utilities for the download cache and staging directories."""

import shutil
from pathlib import Path


def expand_path(path: str) -> Path:
    """Expand and normalize a path, resolving ~ and relative paths.

    Args:
        path: Path string that may contain ~ or be relative

    Returns:
        Absolute Path object
    """
    return Path(path).expanduser().resolve()


def ensure_dir(path: Path) -> Path:
    """Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure exists

    Returns:
        The path that was ensured
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def remove_path(path: Path) -> None:
    """Remove a file, symlink or directory tree if it exists."""
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.is_dir():
        shutil.rmtree(path)


def copy_tree_contents(source: Path, destination: Path) -> None:
    """Copy everything inside ``source`` into ``destination``.

    Existing files in ``destination`` are overwritten; symlinks are copied
    as links.
    """
    shutil.copytree(source, destination, symlinks=True, dirs_exist_ok=True)
