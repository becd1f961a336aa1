"""Dependency injection container for the store."""

from dependency_injector import containers, providers

from jsonstore.core.config import Settings
from jsonstore.core.database import Database
from jsonstore.services.cleanup import CleanupOptions, ExpiredEntrySweeper
from jsonstore.services.store import JsonStore


class Container(containers.DeclarativeContainer):
    """Store dependency injection container."""

    # Settings
    settings = providers.Singleton(
        Settings,
    )

    # Database (shared by the store and the sweeper)
    database = providers.Singleton(
        Database,
        settings=settings
    )

    # Services
    store = providers.Singleton(
        JsonStore,
        database=database,
        settings=settings
    )

    cleanup_options = providers.Factory(
        CleanupOptions.from_settings,
        settings=settings
    )

    sweeper = providers.Singleton(
        ExpiredEntrySweeper,
        database=database,
        options=cleanup_options
    )


# Global container instance
container = Container()
