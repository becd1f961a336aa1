"""JSON key-value store with per-entry TTL on top of the database service.

Values are always JSON-encoded on write. Expiration is enforced lazily:
``get`` compares ``expires_at`` with the clock and deletes a row it finds
expired. Rows nobody reads are reclaimed by the expired entry sweeper.
"""

import json
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, TYPE_CHECKING

from jsonstore.core.config import MAX_TTL, Settings
from jsonstore.core.exceptions import SerializationError
from jsonstore.core.logging import get_logger, log_cache_operation
from jsonstore.models.entry import StoreEntry

if TYPE_CHECKING:
    from jsonstore.core.database import Database

logger = get_logger(__name__)


@dataclass(frozen=True)
class Lookup:
    """Result of a key lookup: either found with a value, or not found."""

    found: bool
    value: Any = None


NOT_FOUND = Lookup(found=False)


class JsonStore:
    """Async key-value store with expiration-aware reads.

    There is no locking; each call is one or two database statements and
    relies on row-level atomicity of the backing table.
    """

    def __init__(self, database: "Database", settings: Optional[Settings] = None,
                 clock: Callable[[], float] = time.time):
        self.database = database
        self.default_ttl = settings.default_ttl if settings else 0
        self.clock = clock

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> StoreEntry:
        """Store ``value`` under ``key``, replacing any existing entry.

        Args:
            key: Non-empty key
            value: Any JSON-serializable value
            ttl: Seconds until the entry expires; 0 means never. Defaults to
                the configured ``default_ttl``.

        Returns:
            The persisted entry

        Raises:
            SerializationError: ``value`` is not JSON-serializable; nothing was written
            StorageError: The database rejected the write
        """
        _check_key(key)
        if ttl is None:
            ttl = self.default_ttl
        if isinstance(ttl, bool) or not isinstance(ttl, int) or not 0 <= ttl <= MAX_TTL:
            raise ValueError(f"ttl must be an integer between 0 and {MAX_TTL}, got {ttl!r}")

        try:
            payload = json.dumps(value, allow_nan=False)
        except (TypeError, ValueError, RecursionError) as e:
            logger.error("Failed to serialize value", key=key, error=str(e))
            raise SerializationError(key, str(e)) from e

        now = self.clock()
        expires_at = now + ttl if ttl > 0 else None
        entry = await self.database.upsert(key, payload, expires_at, now)
        log_cache_operation(logger, "set", key, ttl=ttl)
        return entry

    async def lookup(self, key: str) -> Lookup:
        """Look up ``key``, deleting the row if it has expired.

        The expired row is removed with a delete conditioned on the
        ``expires_at`` that was read, so a concurrent ``set`` that rewrote
        the key is left alone. An expired value is never returned, and a
        failure of that delete propagates.
        """
        entry = await self.database.find_by_key(key)
        if entry is None:
            log_cache_operation(logger, "get", key, hit=False)
            return NOT_FOUND

        if entry.is_expired(self.clock()):
            deleted = await self.database.delete_by_key(key, expires_at=entry.expires_at)
            log_cache_operation(logger, "get", key, hit=False, expired=True,
                                deleted=bool(deleted))
            return NOT_FOUND

        log_cache_operation(logger, "get", key, hit=True)
        return Lookup(found=True, value=_decode(entry.payload))

    async def get(self, key: str, default: Any = None) -> Any:
        """Get the value for ``key``, or ``default`` if missing or expired."""
        result = await self.lookup(key)
        return result.value if result.found else default

    async def delete(self, key: str) -> Optional[int]:
        """Delete ``key`` whether or not it has expired.

        Returns:
            Number of rows deleted, or None if the key did not exist
        """
        entry = await self.database.find_by_key(key)
        if entry is None:
            log_cache_operation(logger, "delete", key, deleted=False)
            return None

        deleted = await self.database.delete_by_key(key)
        log_cache_operation(logger, "delete", key, deleted=bool(deleted))
        return deleted

    async def clear(self) -> int:
        """Delete every entry. Returns count deleted."""
        deleted = await self.database.delete_all()
        logger.info("Store cleared", count=deleted)
        return deleted

    async def exists(self, key: str) -> bool:
        """Check if ``key`` exists and has not expired. Never deletes."""
        entry = await self.database.find_by_key(key)
        return entry is not None and not entry.is_expired(self.clock())


def _check_key(key: str) -> None:
    if not isinstance(key, str) or not key:
        raise ValueError("key must be a non-empty string")


def _decode(payload: str) -> Any:
    # Rows written by other tools may hold a bare primitive instead of JSON.
    try:
        return json.loads(payload)
    except ValueError:
        return payload
