"""Configuration loader with merge logic and precedence handling."""

import copy
import os
from pathlib import Path
from typing import Any, Optional

import yaml

from source_fetcher.config.defaults import DEFAULT_CONFIG
from source_fetcher.config.schema import SourceFetcherConfig
from source_fetcher.utils.paths import expand_path

CONFIG_FILENAME = "sources.yaml"
USER_CONFIG_PATH = "~/.config/source-fetcher/sources.yaml"

_TRUTHY = {"1", "true", "yes", "on"}


def find_config_files() -> list[Path]:
    """Find configuration files in standard locations.

    Searches for configuration files in order of precedence (lowest to highest):
    1. Project config (./sources.yaml in current directory)
    2. User config (~/.config/source-fetcher/sources.yaml)

    Returns:
        List of Path objects for existing config files, ordered from lowest
        to highest precedence (so later configs override earlier ones)
    """
    config_files = []

    project_config = Path.cwd() / CONFIG_FILENAME
    if project_config.exists():
        config_files.append(project_config)

    user_config = expand_path(USER_CONFIG_PATH)
    if user_config.exists():
        config_files.append(user_config)

    return config_files


def load_yaml_file(file_path: Path) -> dict[str, Any]:
    """Load and parse a YAML configuration file.

    Args:
        file_path: Path to the YAML file

    Returns:
        Dictionary containing the parsed YAML content

    Raises:
        yaml.YAMLError: If the file contains invalid YAML
        FileNotFoundError: If the file doesn't exist
    """
    with open(file_path, "r") as f:
        content = yaml.safe_load(f)
        return content if content is not None else {}


def merge_configs(configs: list[dict[str, Any]]) -> dict[str, Any]:
    """Deep merge multiple configuration dictionaries.

    Later configs override earlier ones. Nested dictionaries are merged
    recursively; lists (such as ``resources``) are replaced wholesale.

    Args:
        configs: Configuration dictionaries from lowest to highest precedence

    Returns:
        Merged configuration dictionary
    """
    result: dict[str, Any] = {}
    for config in configs:
        result = _deep_merge(result, config)
    return result


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides to configuration.

    Supports the following environment variables:
    - SOURCE_FETCHER_CACHE: Override settings.cache_dir
    - SOURCE_FETCHER_PREFIX: Override settings.prefix
    - SOURCE_FETCHER_VERBOSE: Override settings.verbose (1/true/yes/on)
    - SOURCE_FETCHER_SOURCEFORGE_MIRROR: Override settings.bottle_mirror

    Args:
        config: Configuration dictionary to apply overrides to

    Returns:
        Configuration dictionary with environment overrides applied
    """
    result = config.copy()
    result["settings"] = dict(result.get("settings") or {})
    settings = result["settings"]

    if cache_dir := os.getenv("SOURCE_FETCHER_CACHE"):
        settings["cache_dir"] = cache_dir

    if prefix := os.getenv("SOURCE_FETCHER_PREFIX"):
        settings["prefix"] = prefix

    if verbose := os.getenv("SOURCE_FETCHER_VERBOSE"):
        settings["verbose"] = verbose.strip().lower() in _TRUTHY

    if mirror := os.getenv("SOURCE_FETCHER_SOURCEFORGE_MIRROR"):
        settings["bottle_mirror"] = mirror

    return result


def load_config(config_path: Optional[Path] = None) -> SourceFetcherConfig:
    """Load and merge configuration from all sources.

    Configuration precedence (lowest to highest):
    1. Built-in defaults
    2. Project config (./sources.yaml)
    3. User config (~/.config/source-fetcher/sources.yaml)
    4. Environment variables
    5. Explicitly provided config_path (if given)

    Args:
        config_path: Optional explicit path to a config file

    Returns:
        Validated SourceFetcherConfig instance

    Raises:
        pydantic.ValidationError: If the merged configuration is invalid
        yaml.YAMLError: If a config file contains invalid YAML
        FileNotFoundError: If config_path is provided but doesn't exist
    """
    configs_to_merge = [copy.deepcopy(DEFAULT_CONFIG)]

    for config_file in find_config_files():
        try:
            configs_to_merge.append(load_yaml_file(config_file))
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Error loading {config_file}: {e}") from e

    merged_config = apply_env_overrides(merge_configs(configs_to_merge))

    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        merged_config = merge_configs([merged_config, load_yaml_file(config_path)])

    return SourceFetcherConfig(**merged_config)
