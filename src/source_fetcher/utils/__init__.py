"""Filesystem, process and console helpers."""
