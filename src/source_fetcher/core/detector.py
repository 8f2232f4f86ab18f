"""Selection of a download strategy for a URL."""

import inspect
import re
from typing import Any, Optional

from source_fetcher.config.schema import SettingsConfig
from source_fetcher.core.resource import Resource
from source_fetcher.exceptions import ConfigurationError
from source_fetcher.fetch.base import AbstractDownloadStrategy
from source_fetcher.fetch.bazaar import BazaarDownloadStrategy
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
from source_fetcher.utils.system import CommandRunner

StrategyClass = type[AbstractDownloadStrategy]

# Checked in order; the first match wins. Patterns overlap, so the
# Apache mirror rule has to come before the generic svn host rules.
URL_PATTERNS: list[tuple[re.Pattern, StrategyClass]] = [
    (re.compile(r"^https?://.+\.git$"), GitDownloadStrategy),
    (re.compile(r"^git://"), GitDownloadStrategy),
    (re.compile(r"^http://www\.apache\.org/dyn/closer\.cgi"), CurlApacheMirrorDownloadStrategy),
    (re.compile(r"^https?://(.+?\.)?googlecode\.com/svn"), SubversionDownloadStrategy),
    (re.compile(r"^https?://svn\."), SubversionDownloadStrategy),
    (re.compile(r"^svn://"), SubversionDownloadStrategy),
    (re.compile(r"^https?://(.+?\.)?sourceforge\.net/svnroot/"), SubversionDownloadStrategy),
    (re.compile(r"^cvs://"), CVSDownloadStrategy),
    (re.compile(r"^https?://(.+?\.)?googlecode\.com/hg"), MercurialDownloadStrategy),
    (re.compile(r"^hg://"), MercurialDownloadStrategy),
    (re.compile(r"^bzr://"), BazaarDownloadStrategy),
    (re.compile(r"^fossil://"), FossilDownloadStrategy),
    (re.compile(r"^http://svn\.apache\.org/repos/"), SubversionDownloadStrategy),
    (re.compile(r"^svn\+http://"), SubversionDownloadStrategy),
    (re.compile(r"^https?://(.+?\.)?sourceforge\.net/hgweb/"), MercurialDownloadStrategy),
]

STRATEGY_TOKENS: dict[str, StrategyClass] = {
    "hg": MercurialDownloadStrategy,
    "nounzip": NoUnzipCurlDownloadStrategy,
    "git": GitDownloadStrategy,
    "bzr": BazaarDownloadStrategy,
    "svn": SubversionDownloadStrategy,
    "curl": CurlDownloadStrategy,
    "ssl3": CurlSSL3DownloadStrategy,
    "cvs": CVSDownloadStrategy,
    "post": CurlPostDownloadStrategy,
    "fossil": FossilDownloadStrategy,
}

# Strategies that can also be named by class, e.g. in a config file
STRATEGY_CLASSES: dict[str, StrategyClass] = {
    cls.__name__: cls
    for cls in (
        CurlDownloadStrategy,
        CurlApacheMirrorDownloadStrategy,
        CurlPostDownloadStrategy,
        CurlSSL3DownloadStrategy,
        NoUnzipCurlDownloadStrategy,
        CurlUnsafeDownloadStrategy,
        CurlBottleDownloadStrategy,
        LocalBottleDownloadStrategy,
        S3DownloadStrategy,
        GitDownloadStrategy,
        SubversionDownloadStrategy,
        UnsafeSubversionDownloadStrategy,
        MercurialDownloadStrategy,
        BazaarDownloadStrategy,
        CVSDownloadStrategy,
        FossilDownloadStrategy,
    )
}


def detect(url: str, strategy: Optional[Any] = None) -> StrategyClass:
    """Pick the strategy class for a URL.

    Args:
        url: Resource URL
        strategy: Optional explicit strategy: a concrete strategy class, one
            of the tokens in :data:`STRATEGY_TOKENS`, or a class name from
            :data:`STRATEGY_CLASSES`

    Returns:
        A concrete subclass of AbstractDownloadStrategy

    Raises:
        ConfigurationError: If ``strategy`` is not a concrete strategy class
            or a known name
    """
    if strategy is None:
        return detect_from_url(url)
    if isinstance(strategy, type):
        if not issubclass(strategy, AbstractDownloadStrategy):
            raise ConfigurationError(f"{strategy.__name__} is not a download strategy")
        if inspect.isabstract(strategy):
            raise ConfigurationError(
                f"{strategy.__name__} is an abstract base, not a download strategy"
            )
        return strategy
    if isinstance(strategy, str):
        return detect_from_token(strategy)
    raise ConfigurationError(f"Unknown download strategy {strategy!r}")


def detect_from_url(url: str) -> StrategyClass:
    """Match ``url`` against :data:`URL_PATTERNS`, defaulting to plain HTTP."""
    for pattern, strategy in URL_PATTERNS:
        if pattern.search(url):
            return strategy
    return CurlDownloadStrategy


def detect_from_token(token: str) -> StrategyClass:
    """Map a strategy token such as ``git`` or ``post``, or a class name, to its class."""
    if token in STRATEGY_TOKENS:
        return STRATEGY_TOKENS[token]
    if token in STRATEGY_CLASSES:
        return STRATEGY_CLASSES[token]
    raise ConfigurationError(
        f"Unknown download strategy {token!r} was requested. "
        f"Known strategies: {', '.join(sorted(STRATEGY_TOKENS))}"
    )


def build_strategy(
    resource: Resource,
    *,
    settings: Optional[SettingsConfig] = None,
    runner: Optional[CommandRunner] = None,
) -> DownloadStrategy:
    """Detect and instantiate the strategy for ``resource``."""
    strategy = detect(resource.url, resource.using)
    if issubclass(strategy, LocalBottleDownloadStrategy):
        return strategy(resource.url, settings=settings, runner=runner)
    return strategy(resource.name, resource, settings=settings, runner=runner)
