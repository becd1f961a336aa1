"""Persistent JSON key-value store with per-entry TTL.

- ``JsonStore``: set/get/delete/clear with lazy expiration on read
- ``ExpiredEntrySweeper``: periodic bulk delete of expired rows
- ``Database``: SQLModel/SQLAlchemy async persistence for both
"""

from .core.config import Settings
from .core.database import Database
from .core.exceptions import JsonStoreError, SerializationError, StorageError
from .core.logging import configure_logging, get_logger
from .models.entry import StoreEntry
from .services.store import JsonStore, Lookup, NOT_FOUND
from .services.cleanup import CleanupOptions, ExpiredEntrySweeper

__version__ = "1.0.0"

__all__ = [
    "Settings",
    "Database",
    "JsonStoreError",
    "SerializationError",
    "StorageError",
    "configure_logging",
    "get_logger",
    "StoreEntry",
    "JsonStore",
    "Lookup",
    "NOT_FOUND",
    "CleanupOptions",
    "ExpiredEntrySweeper",
]
