"""Storage abstractions for the LMS companion core."""

from .defaults import DefaultsStore, FileDefaultsStore

__all__ = ["DefaultsStore", "FileDefaultsStore"]
