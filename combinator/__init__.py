"""Discover, list, read and merge text files in a deterministic order."""

__version__ = "0.1.0"
