"""Storage backends and startup selection."""

from facturier.config.settings import Settings
from facturier.core.exceptions import ConfigurationError
from facturier.core.interfaces.storage import IStorage
from facturier.infrastructure.storage.json_store import JsonStorage
from facturier.infrastructure.storage.sqlite import SQLiteStorage


def create_storage(settings: Settings) -> IStorage:
    """Build the backend named by ``STORAGE_BACKEND``. Not yet initialized."""
    storage = settings.storage
    if storage.backend == "sqlite":
        return SQLiteStorage(
            storage.db_path,
            pool_size=storage.pool_size,
            busy_timeout=storage.busy_timeout,
        )
    if storage.backend == "json":
        return JsonStorage(storage.json_dir)
    raise ConfigurationError(
        f"Unknown storage backend: {storage.backend}",
        code="UNKNOWN_BACKEND",
    )


__all__ = [
    "create_storage",
    "SQLiteStorage",
    "JsonStorage",
]
