# keeper_core/storage/__init__.py

from .models import SCHEMAS, TableSchema
from .provider import RecordRepository, StorageProvider
from .providers.memory_provider import InMemoryStorage
from .providers.sqlite_provider import SQLiteStorage
import os


def load_storage_provider(config=None) -> StorageProvider:
    """
    Factory resolver for selecting the local cache backend.

        - sqlite (default)
        - memory

    ``config`` may be a KeeperConfig or a plain dict with ``provider`` /
    ``sqlite_path`` keys; environment variables fill the gaps.
    """
    if config is None:
        config = {}
    if isinstance(config, dict):
        provider = config.get("provider") or os.getenv("KEEPER_STORAGE_PROVIDER", "sqlite")
        db_path = config.get("sqlite_path") or os.getenv("KEEPER_DB_PATH", "db/keeper_cache.db")
    else:
        provider, db_path = config.storage_provider, config.db_path

    if provider == "memory":
        return InMemoryStorage()

    if provider == "sqlite":
        return SQLiteStorage(db_path)

    raise ValueError(f"Unknown storage provider: {provider}")


__all__ = [
    "SCHEMAS",
    "TableSchema",
    "RecordRepository",
    "StorageProvider",
    "InMemoryStorage",
    "SQLiteStorage",
    "load_storage_provider",
]
