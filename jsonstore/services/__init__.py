"""Store and sweeper services."""

from .store import JsonStore, Lookup, NOT_FOUND
from .cleanup import CleanupOptions, ExpiredEntrySweeper

__all__ = [
    "JsonStore",
    "Lookup",
    "NOT_FOUND",
    "CleanupOptions",
    "ExpiredEntrySweeper",
]
