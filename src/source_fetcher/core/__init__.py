"""Core resource models and strategy detection."""

from source_fetcher.core.resource import REF_TYPES, RefSelector, Resource, Version

__all__ = ["REF_TYPES", "RefSelector", "Resource", "Version"]
