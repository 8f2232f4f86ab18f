"""Archive type detection for downloaded files."""

import posixpath
import re
from enum import Enum
from pathlib import Path
from typing import Optional, Union

BOTTLE_EXTNAME_RX = re.compile(r"(\.[a-z0-9_]+\.bottle\.(\d+\.)?tar\.gz)$")
DOUBLE_EXTNAME_RX = re.compile(r"(\.(tar|cpio|pax)\.(gz|bz2|lz|xz|Z))$")

# POSIX tar magic sits at a 257 byte offset
HEADER_SIZE = 262


class ArchiveType(str, Enum):
    """How a downloaded file is unpacked."""

    ZIP = "zip"
    GZIP_ONLY = "gzip_only"
    BZIP2_ONLY = "bzip2_only"
    GZIP = "gzip"
    BZIP2 = "bzip2"
    COMPRESS = "compress"
    TAR = "tar"
    XZ = "xz"
    LZIP = "lzip"
    XAR = "xar"
    RAR = "rar"
    P7ZIP = "p7zip"


# Types that tar can read directly
TAR_TYPES = frozenset(
    {ArchiveType.GZIP, ArchiveType.BZIP2, ArchiveType.COMPRESS, ArchiveType.TAR}
)

MAGIC_NUMBERS = (
    (b"PK\x03\x04", ArchiveType.ZIP),
    (b"\x1f\x8b", ArchiveType.GZIP),
    (b"BZh", ArchiveType.BZIP2),
    (b"\x1f\x9d", ArchiveType.COMPRESS),
    (b"\xfd7zXZ\x00", ArchiveType.XZ),
    (b"LZIP", ArchiveType.LZIP),
    (b"Rar!", ArchiveType.RAR),
    (b"7z\xbc\xaf\x27\x1c", ArchiveType.P7ZIP),
    (b"xar!", ArchiveType.XAR),
)


def extname(path: Union[str, Path]) -> str:
    """Return the extension of ``path``, keeping known double extensions.

    ``foo-1.0.tar.gz`` gives ``.tar.gz`` and ``foo-1.0.el_capitan.bottle.tar.gz``
    gives ``.el_capitan.bottle.tar.gz``; anything else falls back to the last
    suffix only.
    """
    path = str(path)
    for rx in (BOTTLE_EXTNAME_RX, DOUBLE_EXTNAME_RX):
        match = rx.search(path)
        if match:
            return match.group(1)
    return posixpath.splitext(path)[1]


def url_extname(url: str) -> str:
    """Extension of a download URL with any query string removed.

    For ``https://example.com/download.php?file=foo-1.0.tar.gz`` this is
    ``.tar.gz``, not ``.php``.
    """
    return extname(url).split("?", 1)[0]


def basename_without_params(url: str) -> str:
    """Last URL path component with any ``?key=value`` suffix stripped."""
    basename = posixpath.basename(url)
    return basename.split("?", 1)[0] or basename


def strip_suffix(name: str, suffix: str) -> str:
    """Remove ``suffix`` from ``name`` if present (and not the whole name)."""
    if suffix and name.endswith(suffix) and name != suffix:
        return name[: -len(suffix)]
    return name


def read_header(path: Path) -> bytes:
    with open(path, "rb") as f:
        return f.read(HEADER_SIZE)


def compression_type(path: Path) -> Optional[ArchiveType]:
    """Classify a downloaded file.

    The extension decides for single compressed files (``.gz``/``.bz2`` not
    preceded by ``.tar``) and for jars, which are never unpacked. Otherwise
    the file header decides, with the extension as a last resort so a broken
    tarball still reaches the extractor and fails there with a useful error.

    Returns:
        The archive type, or None when the file should be copied as-is
    """
    ext = extname(path.name)
    if ext in (".jar", ".war"):
        return None
    if ext == ".gz":
        return ArchiveType.GZIP_ONLY
    if ext == ".bz2":
        return ArchiveType.BZIP2_ONLY

    header = read_header(path)
    for magic, archive_type in MAGIC_NUMBERS:
        if header.startswith(magic):
            return archive_type
    if header[257:262] == b"ustar":
        return ArchiveType.TAR

    if ext in (".tar.gz", ".tgz", ".tar.bz2", ".tbz"):
        return ArchiveType.TAR
    if ext == ".zip":
        return ArchiveType.ZIP
    return None
