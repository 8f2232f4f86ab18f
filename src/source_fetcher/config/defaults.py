"""Built-in default configuration for source fetcher."""

# Default configuration that serves as the base for all other configs
DEFAULT_CONFIG = {
    "version": "1.0",
    "settings": {
        "cache_dir": "~/.cache/source-fetcher",
        "prefix": "/usr/local",
        "verbose": False,
        "bottle_mirror": None,
        "download_timeout": 60.0,
    },
    "resources": [],
}
