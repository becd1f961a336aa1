"""Async database service with SQLModel and SQLAlchemy 2.0.

Owns the engine and exposes the record-level operations the store and the
sweeper are built on. Every operation is a single statement in its own
session; failures are logged and re-raised as ``StorageError``.
"""

import logging
from typing import Optional
from contextlib import asynccontextmanager

from sqlmodel import SQLModel, select
from sqlalchemy import delete
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from jsonstore.core.config import Settings
from jsonstore.core.exceptions import StorageError
from jsonstore.core.logging import get_logger
from jsonstore.models.entry import StoreEntry

logger = get_logger(__name__)


class Database:
    """Async database service over the ``json_store`` table."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine = None
        self.async_session = None

    async def startup(self):
        """Initialize database connection and create tables."""
        try:
            logging.getLogger("aiosqlite").setLevel(logging.WARNING)
            logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
            logging.getLogger("sqlalchemy.dialects").setLevel(logging.WARNING)
            logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)

            engine_options = {"echo": self.settings.database_echo}
            if not self.settings.is_sqlite:
                engine_options["pool_size"] = self.settings.database_pool_size
                engine_options["max_overflow"] = self.settings.database_max_overflow

            self.engine = create_async_engine(self.settings.database_url, **engine_options)

            self.async_session = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False
            )

            async with self.engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)

            logger.info("Database initialized successfully")

        except Exception as e:
            logger.error("Database startup failed", error=str(e))
            raise

    async def shutdown(self):
        """Close database connections."""
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self.async_session = None
            logger.info("Database connections closed")

    @asynccontextmanager
    async def get_session(self):
        """Get async database session."""
        if not self.async_session:
            raise RuntimeError("Database not initialized")

        async with self.async_session() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    def _insert(self):
        if self.engine.dialect.name == "postgresql":
            return postgresql_insert
        return sqlite_insert

    # ============================================================================
    # Store Entries
    # ============================================================================

    async def find_by_key(self, key: str) -> Optional[StoreEntry]:
        """Get the row for ``key``, expired or not."""
        try:
            async with self.get_session() as session:
                stmt = select(StoreEntry).where(StoreEntry.key == key)
                result = await session.execute(stmt)
                return result.scalar_one_or_none()

        except SQLAlchemyError as e:
            logger.error("Failed to find store entry", key=key, error=str(e))
            raise StorageError("find_by_key", str(e)) from e

    async def upsert(self, key: str, payload: str, expires_at: Optional[float],
                     now: float) -> StoreEntry:
        """Insert or fully replace the row for ``key`` in one statement.

        ``created_at`` is written on insert only; an overwrite refreshes
        ``payload``, ``expires_at`` and ``updated_at``.
        """
        try:
            insert = self._insert()
            stmt = insert(StoreEntry).values(
                key=key,
                payload=payload,
                expires_at=expires_at,
                created_at=now,
                updated_at=now,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=["key"],
                set_={
                    "payload": stmt.excluded.payload,
                    "expires_at": stmt.excluded.expires_at,
                    "updated_at": stmt.excluded.updated_at,
                },
            ).returning(StoreEntry)

            async with self.get_session() as session:
                result = await session.scalars(
                    stmt, execution_options={"populate_existing": True}
                )
                entry = result.one()
                await session.commit()
                return entry

        except SQLAlchemyError as e:
            logger.error("Failed to upsert store entry", key=key, error=str(e))
            raise StorageError("upsert", str(e)) from e

    async def delete_by_key(self, key: str, expires_at: Optional[float] = None) -> int:
        """Delete the row for ``key``. Returns count deleted.

        With ``expires_at`` the delete only matches a row that still carries
        that expiration, so a row rewritten in the meantime survives.
        """
        try:
            stmt = delete(StoreEntry).where(StoreEntry.key == key)
            if expires_at is not None:
                stmt = stmt.where(StoreEntry.expires_at == expires_at)

            async with self.get_session() as session:
                result = await session.execute(
                    stmt.execution_options(synchronize_session=False)
                )
                await session.commit()
                return result.rowcount

        except SQLAlchemyError as e:
            logger.error("Failed to delete store entry", key=key, error=str(e))
            raise StorageError("delete_by_key", str(e)) from e

    async def delete_all(self) -> int:
        """Delete every row. Returns count deleted."""
        try:
            async with self.get_session() as session:
                result = await session.execute(
                    delete(StoreEntry).execution_options(synchronize_session=False)
                )
                await session.commit()
                return result.rowcount

        except SQLAlchemyError as e:
            logger.error("Failed to clear store", error=str(e))
            raise StorageError("delete_all", str(e)) from e

    async def delete_expired(self, before: float) -> int:
        """Remove all rows whose expiration is earlier than ``before``.

        Rows without an expiration are never matched. Returns count deleted.
        """
        try:
            stmt = delete(StoreEntry).where(
                StoreEntry.expires_at.isnot(None),
                StoreEntry.expires_at < before
            )

            async with self.get_session() as session:
                result = await session.execute(
                    stmt.execution_options(synchronize_session=False)
                )
                await session.commit()
                return result.rowcount

        except SQLAlchemyError as e:
            logger.error("Failed to delete expired store entries", error=str(e))
