"""Resolve declared resources into cached artifacts and stage them for builds."""

__version__ = "0.1.0"
