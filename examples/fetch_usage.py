"""Example demonstrating strategy detection, fetching and staging.

This shows how to use the library directly, without the CLI or a
sources.yaml file.
"""

import os
import tempfile
from pathlib import Path

from source_fetcher.config.schema import SettingsConfig
from source_fetcher.core.detector import build_strategy, detect
from source_fetcher.core.resource import Resource
from source_fetcher.exceptions import SourceFetcherError


def main():
    """Fetch a release tarball and unpack it into a scratch directory."""
    settings = SettingsConfig(cache_dir=str(Path.home() / ".cache" / "source-fetcher"))

    resource = Resource(
        name="zlib",
        url="https://zlib.net/zlib-1.3.1.tar.gz",
        version="1.3.1",
        mirrors=["https://github.com/madler/zlib/releases/download/v1.3.1/zlib-1.3.1.tar.gz"],
    )

    print(f"Strategy for {resource.url}: {detect(resource.url).__name__}")
    strategy = build_strategy(resource, settings=settings)
    print(f"Cache location: {strategy.cached_location}")

    build_dir = Path(tempfile.mkdtemp(prefix="zlib-build-"))
    previous = Path.cwd()
    os.chdir(build_dir)
    try:
        strategy.fetch()
        strategy.stage()
        print(f"✓ Staged into: {Path.cwd()}")
    except SourceFetcherError as e:
        print(f"✗ Error: {e}")
    finally:
        os.chdir(previous)

    # Strategy detection alone never touches the network
    print("\nDetection examples:")
    for url in (
        "https://github.com/madler/zlib.git",
        "svn://svn.example.org/project/trunk",
        "hg://https://hg.example.org/project",
    ):
        print(f"  {url}: {detect(url).__name__}")


if __name__ == "__main__":
    main()
