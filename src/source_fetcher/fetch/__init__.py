"""Download strategies and the cache they populate."""

from source_fetcher.fetch.base import (
    AbstractDownloadStrategy,
    AbstractFileDownloadStrategy,
    VCSDownloadStrategy,
)
from source_fetcher.fetch.bazaar import BazaarDownloadStrategy
from source_fetcher.fetch.cache import DownloadCache
from source_fetcher.fetch.cvs import CVSDownloadStrategy
from source_fetcher.fetch.fossil import FossilDownloadStrategy
from source_fetcher.fetch.git import GitDownloadStrategy
from source_fetcher.fetch.http import (
    CurlApacheMirrorDownloadStrategy,
    CurlBottleDownloadStrategy,
    CurlDownloadStrategy,
    CurlPostDownloadStrategy,
    CurlSSL3DownloadStrategy,
    CurlUnsafeDownloadStrategy,
    LocalBottleDownloadStrategy,
    NoUnzipCurlDownloadStrategy,
    S3DownloadStrategy,
)
from source_fetcher.fetch.mercurial import MercurialDownloadStrategy
from source_fetcher.fetch.protocols import DownloadStrategy
from source_fetcher.fetch.subversion import (
    SubversionDownloadStrategy,
    UnsafeSubversionDownloadStrategy,
)

__all__ = [
    "AbstractDownloadStrategy",
    "AbstractFileDownloadStrategy",
    "BazaarDownloadStrategy",
    "CVSDownloadStrategy",
    "CurlApacheMirrorDownloadStrategy",
    "CurlBottleDownloadStrategy",
    "CurlDownloadStrategy",
    "CurlPostDownloadStrategy",
    "CurlSSL3DownloadStrategy",
    "CurlUnsafeDownloadStrategy",
    "DownloadCache",
    "DownloadStrategy",
    "FossilDownloadStrategy",
    "GitDownloadStrategy",
    "LocalBottleDownloadStrategy",
    "MercurialDownloadStrategy",
    "NoUnzipCurlDownloadStrategy",
    "S3DownloadStrategy",
    "SubversionDownloadStrategy",
    "UnsafeSubversionDownloadStrategy",
    "VCSDownloadStrategy",
]
