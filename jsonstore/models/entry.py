"""SQLModel table for the JSON key-value store.

Timestamps are Unix seconds (float), the same clock the store and the
sweeper compare against.
"""

import time
from typing import Optional
from sqlmodel import SQLModel, Field


class StoreEntry(SQLModel, table=True):
    """One stored value with optional expiration.

    A row whose ``expires_at`` lies in the past is logically dead, even while
    it is still physically present in the table.
    """

    __tablename__ = "json_store"

    key: str = Field(primary_key=True, max_length=512)
    payload: str  # JSON text
    expires_at: Optional[float] = Field(default=None, index=True)  # None = never expires
    created_at: float = Field(default_factory=time.time)
    updated_at: float = Field(default_factory=time.time)

    def is_expired(self, now: float) -> bool:
        """True once the clock has passed ``expires_at``."""
        return self.expires_at is not None and self.expires_at < now
