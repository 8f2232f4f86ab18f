"""CLI application entry point."""

import os
from pathlib import Path
from typing import Optional

import typer
import yaml
from pydantic import ValidationError
from rich.table import Table

from source_fetcher.config.loader import CONFIG_FILENAME, load_config
from source_fetcher.config.schema import ResourceConfig, SourceFetcherConfig
from source_fetcher.core.detector import build_strategy, detect
from source_fetcher.exceptions import SourceFetcherError
from source_fetcher.fetch.cache import DownloadCache
from source_fetcher.fetch.protocols import DownloadStrategy
from source_fetcher.utils.output import (
    console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from source_fetcher.utils.paths import ensure_dir

app = typer.Typer(
    name="source-fetcher",
    help="Fetch source resources into a local cache and stage them for builds",
    no_args_is_help=True,
)


# Template for init command
TEMPLATE_CONFIG = """version: "1.0"

settings:
  cache_dir: "~/.cache/source-fetcher"
  prefix: "/usr/local"
  verbose: false

resources: []
  # Example: release tarball with a fallback mirror
  # - name: libfoo
  #   url: "https://example.com/libfoo-1.2.tar.gz"
  #   version: "1.2"
  #   mirrors:
  #     - "https://mirror.example.org/libfoo-1.2.tar.gz"

  # Example: git branch
  # - name: libbar
  #   url: "https://github.com/example/libbar.git"
  #   version: "HEAD"
  #   branch: "develop"
"""

ConfigOption = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to config file (merged over the default search)",
)


def load_or_exit(config: Optional[Path]) -> SourceFetcherConfig:
    """Load configuration, reporting problems and exiting on failure."""
    try:
        return load_config(config)
    except ValidationError as e:
        print_error("Configuration validation failed:")
        console.print(e)
        raise typer.Exit(1)
    except (OSError, yaml.YAMLError) as e:
        print_error(f"Failed to load config: {e}")
        raise typer.Exit(1)


def select_resources(
    cfg: SourceFetcherConfig, names: Optional[list[str]]
) -> list[ResourceConfig]:
    """Pick the named resources, or all of them when no names are given."""
    if not names:
        return cfg.resources

    selected = []
    for name in names:
        resource = cfg.get_resource(name)
        if resource is None:
            print_error(f"Resource not found in configuration: {name}")
            raise typer.Exit(1)
        selected.append(resource)
    return selected


def strategy_for(resource: ResourceConfig, cfg: SourceFetcherConfig) -> DownloadStrategy:
    try:
        return build_strategy(resource.to_resource(), settings=cfg.settings)
    except SourceFetcherError as e:
        print_error(f"{resource.name}: {e}")
        raise typer.Exit(1)


@app.command()
def init(
    force: bool = typer.Option(
        False,
        "--force",
        help="Overwrite existing config file",
    ),
):
    """Create a sources.yaml template in the current directory."""
    config_file = Path.cwd() / CONFIG_FILENAME

    if config_file.exists() and not force:
        print_error(f"Config file already exists: {config_file}")
        print_info("Use --force to overwrite")
        raise typer.Exit(1)

    config_file.write_text(TEMPLATE_CONFIG)
    print_success(f"Created config file: {config_file}")


@app.command(name="detect")
def detect_command(
    url: str = typer.Argument(..., help="Resource URL"),
    using: Optional[str] = typer.Option(
        None, "--using", "-u", help="Explicit strategy token (git, svn, post, ...)"
    ),
):
    """Show which download strategy handles a URL."""
    try:
        strategy = detect(url, using)
    except SourceFetcherError as e:
        print_error(str(e))
        raise typer.Exit(1)
    console.print(strategy.__name__)


@app.command()
def fetch(
    names: Optional[list[str]] = typer.Argument(
        None, help="Resources to fetch (default: all declared resources)"
    ),
    config: Optional[Path] = ConfigOption,
):
    """Download or update declared resources in the cache."""
    cfg = load_or_exit(config)
    resources = select_resources(cfg, names)

    if not resources:
        print_warning("No resources declared")
        return

    errors = []
    for resource in resources:
        try:
            strategy = build_strategy(resource.to_resource(), settings=cfg.settings)
            strategy.fetch()
        except SourceFetcherError as e:
            print_error(f"{resource.name}: {e}")
            errors.append(resource.name)
            continue
        print_success(f"{resource.name}: {strategy.cached_location}")

    if errors:
        console.print()
        print_error(f"Failed to fetch {len(errors)} resource(s): {', '.join(errors)}")
        raise typer.Exit(1)


@app.command()
def stage(
    name: str = typer.Argument(..., help="Resource to stage"),
    into: Path = typer.Option(
        Path("."), "--into", "-i", help="Directory to stage the resource into"
    ),
    config: Optional[Path] = ConfigOption,
):
    """Fetch a resource and unpack it into a build directory."""
    cfg = load_or_exit(config)
    (resource,) = select_resources(cfg, [name])
    strategy = strategy_for(resource, cfg)

    previous = Path.cwd()
    os.chdir(ensure_dir(into.expanduser().resolve()))
    try:
        strategy.fetch()
        strategy.stage()
        staged = Path.cwd()
    except SourceFetcherError as e:
        print_error(f"{name}: {e}")
        raise typer.Exit(1)
    finally:
        os.chdir(previous)

    print_success(f"Staged {name} into {staged}")


@app.command(name="list")
def list_resources(config: Optional[Path] = ConfigOption):
    """List declared resources and their cache state."""
    cfg = load_or_exit(config)

    if not cfg.resources:
        print_warning("No resources declared")
        return

    table = Table(title="Resources")
    table.add_column("Name", style="cyan")
    table.add_column("Strategy", style="magenta")
    table.add_column("Cached", style="green")
    table.add_column("Location")

    for resource in cfg.resources:
        strategy = strategy_for(resource, cfg)
        location = strategy.cached_location
        table.add_row(
            resource.name,
            type(strategy).__name__,
            "yes" if location.exists() else "no",
            str(location),
        )

    console.print(table)


@app.command()
def clean(
    names: Optional[list[str]] = typer.Argument(
        None, help="Resources to remove from the cache (default: all declared)"
    ),
    everything: bool = typer.Option(
        False, "--all", help="Remove every entry in the cache, declared or not"
    ),
    config: Optional[Path] = ConfigOption,
):
    """Remove cached downloads and checkouts."""
    cfg = load_or_exit(config)

    if everything:
        cache = DownloadCache(Path(cfg.settings.cache_dir))
        cache.clear_all()
        print_success(f"Cleared {cache.cache_dir}")
        return

    for resource in select_resources(cfg, names):
        strategy = strategy_for(resource, cfg)
        strategy.clear_cache()
        print_success(f"Cleared {resource.name}")


if __name__ == "__main__":
    app()
