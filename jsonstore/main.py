"""Lifespan management for hosting the store inside an application."""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from jsonstore.core.container import Container, container as default_container
from jsonstore.core.logging import configure_logging, get_logger
from jsonstore.services.store import JsonStore

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(container: Optional[Container] = None) -> AsyncIterator[JsonStore]:
    """Apply log settings, start the database and sweeper, yield the store,
    then shut down.

    Usage::

        async with lifespan() as store:
            await store.set("greeting", {"text": "hi"}, ttl=60)
    """
    container = container or default_container
    settings = container.settings()
    configure_logging(settings)

    logger.info("Starting JSON store")
    database = container.database()
    await database.startup()

    sweeper = container.sweeper() if settings.sweeper_enabled else None
    try:
        if sweeper:
            await sweeper.start()

        logger.info("JSON store started successfully")
        yield container.store()
    finally:
        if sweeper:
            await sweeper.stop()
        await database.shutdown()
        logger.info("JSON store shutdown complete")
