"""Periodic sweep of expired store entries.

Follows the start/stop background task pattern of the other long-running
services: one asyncio task, armed by ``start`` and cancelled by ``stop``.
"""
import asyncio
import time
from typing import Callable, Optional, TYPE_CHECKING

from pydantic import BaseModel, Field

from jsonstore.core.logging import get_logger

if TYPE_CHECKING:
    from jsonstore.core.config import Settings
    from jsonstore.core.database import Database

logger = get_logger(__name__)


class CleanupOptions(BaseModel):
    """Sweeper schedule."""

    interval: int = Field(default=3600, ge=1)  # seconds between sweeps
    run_on_init: bool = True

    @classmethod
    def from_settings(cls, settings: "Settings") -> "CleanupOptions":
        return cls(
            interval=settings.sweeper_interval,
            run_on_init=settings.sweeper_run_on_init,
        )


class ExpiredEntrySweeper:
    """Background task that deletes entries whose TTL has passed.

    The store only removes expired rows when somebody reads them; this
    reclaims the rest. A failed scheduled pass is logged and the schedule
    keeps running.
    """

    def __init__(
        self,
        database: "Database",
        options: Optional[CleanupOptions] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.database = database
        self.options = options or CleanupOptions()
        self.clock = clock
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Optionally sweep once, then schedule a sweep every interval.

        A failure of the initial sweep propagates to the caller and nothing
        is scheduled.
        """
        if self._task is not None:
            logger.warning("Expired entry sweeper already running")
            return

        if self.options.run_on_init:
            await self.cleanup()

        self._task = asyncio.create_task(self._cleanup_loop())
        logger.info(
            f"Scheduled cleanup every {self.options.interval} seconds",
            interval=self.options.interval,
            run_on_init=self.options.run_on_init
        )

    async def stop(self) -> None:
        """Cancel the schedule. Safe to call when not running."""
        task, self._task = self._task, None
        if task is None:
            return

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Expired entry sweeper stopped")

    async def _cleanup_loop(self) -> None:
        """Run cleanup every interval until cancelled."""
        while True:
            await asyncio.sleep(self.options.interval)
            try:
                await self.cleanup()
            except Exception as e:
                logger.error("Scheduled cleanup failed", error=str(e))

    async def cleanup(self) -> int:
        """Delete every entry that has expired by now.

        Returns:
            Number of entries deleted

        Raises:
            StorageError: The bulk delete failed (after logging it)
        """
        now = self.clock()
        try:
            deleted = await self.database.delete_expired(now)
        except Exception as e:
            logger.error("Failed to clean up expired entries", error=str(e))
            raise

        if deleted > 0:
            logger.info(f"Cleaned up {deleted} expired entries", count=deleted)
        return deleted
