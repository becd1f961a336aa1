"""Database models."""

from .entry import StoreEntry

__all__ = ["StoreEntry"]
