"""Configuration loading and management."""

from source_fetcher.config.loader import (
    find_config_files,
    load_config,
    merge_configs,
)
from source_fetcher.config.schema import (
    ResourceConfig,
    SettingsConfig,
    SourceFetcherConfig,
)

__all__ = [
    # Loader functions
    "find_config_files",
    "load_config",
    "merge_configs",
    # Schema classes
    "ResourceConfig",
    "SettingsConfig",
    "SourceFetcherConfig",
]
