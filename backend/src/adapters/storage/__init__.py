"""
Storage adapters for Touchline.
Every backend implements the same whole-value key-value contract.
"""

from .base import KeyValueStore
from .memory_store import InMemoryStore
from .file_store import FileStore
from .redis_store import RedisStore

from core.exceptions import ConfigurationError
from core.utils import LoggerFactory

logger = LoggerFactory.get_logger(__name__)


def create_store(settings) -> KeyValueStore:
    """Build the store selected by ``settings.storage_backend``."""
    backend = (settings.storage_backend or "").lower()
    if backend == "memory":
        store = InMemoryStore()
    elif backend == "file":
        store = FileStore(settings.data_dir)
    elif backend == "redis":
        store = RedisStore(key_prefix=settings.redis_key_prefix)
    else:
        raise ConfigurationError(
            "storage_backend",
            f"unknown backend '{settings.storage_backend}' (expected memory, file or redis)"
        )

    logger.info(f"Using {store.backend_name} storage backend")
    return store


__all__ = [
    "KeyValueStore",
    "InMemoryStore",
    "FileStore",
    "RedisStore",
    "create_store",
]
