import logging

from newsflow.core.config import Settings
from newsflow.storage.base import ConflictError, Storage, StorageError
from newsflow.storage.memory import MemoryStorage
from newsflow.storage.sql import SQLStorage

logger = logging.getLogger(__name__)

__all__ = ["ConflictError", "MemoryStorage", "SQLStorage", "Storage", "StorageError", "build_storage"]


def build_storage(settings: Settings) -> Storage:
    """Pick the storage backend once, at process start."""
    backend = settings.STORAGE_BACKEND.lower()
    if backend == "memory":
        storage = MemoryStorage()
    elif backend == "sql":
        storage = SQLStorage(settings.SQLALCHEMY_DATABASE_URI)
    else:
        raise ValueError(f"Unknown STORAGE_BACKEND: {settings.STORAGE_BACKEND!r} (expected 'sql' or 'memory')")
    logger.info(f"Storage backend: {backend}")
    return storage
