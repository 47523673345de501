"""
Redis-backed store for sharing recorded matches between devices.
"""

import json
import logging
from typing import Any, Optional

import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError, TimeoutError as RedisTimeoutError

from config.settings import settings
from core.error_handler import with_storage_retry
from core.exceptions import ErrorContext, StorageConnectionError, StorageSerializationError
from core.utils import StorageKeyBuilder

from .base import KeyValueStore

logger = logging.getLogger(__name__)


class RedisStore(KeyValueStore):
    """
    Stores each value as one JSON string under ``<prefix>:<key>``.
    Connection failures are retried, then surfaced as StorageConnectionError.
    """

    backend_name = "redis"

    def __init__(self, client: Optional[redis.Redis] = None, key_prefix: Optional[str] = None):
        """
        Args:
            client: Ready client; when omitted one is created from settings on first use
            key_prefix: Namespace for all keys
        """
        self.redis_client = client
        self.connection_pool: Optional[redis.ConnectionPool] = None
        self.key_prefix = settings.redis_key_prefix if key_prefix is None else key_prefix

    async def connect(self) -> redis.Redis:
        """Create the connection pool and verify the server answers."""
        if self.redis_client is not None:
            return self.redis_client

        self.connection_pool = redis.ConnectionPool(**settings.redis_connection_kwargs)
        client = redis.Redis(connection_pool=self.connection_pool)
        try:
            await client.ping()
        except (RedisConnectionError, RedisTimeoutError) as e:
            await client.aclose()
            raise StorageConnectionError(
                "redis",
                context=ErrorContext(operation="redis_store.connect"),
                original_error=e
            ) from e

        self.redis_client = client
        logger.info("Redis store connected successfully")
        return client

    async def close(self) -> None:
        if self.redis_client is not None:
            await self.redis_client.aclose()
            self.redis_client = None
            logger.info("Redis store disconnected")

    def _key(self, key: str) -> str:
        return StorageKeyBuilder.build_key(self.key_prefix, key)

    def _connection_error(self, operation: str, key: str, error: Exception) -> StorageConnectionError:
        logger.warning(f"Redis {operation} failed for {key}: {error}")
        return StorageConnectionError(
            "redis",
            context=ErrorContext(operation=f"redis_store.{operation}", parameters={'key': key}),
            original_error=error
        )

    @with_storage_retry()
    async def get(self, key: str) -> Optional[Any]:
        client = await self.connect()
        try:
            raw = await client.get(self._key(key))
        except (RedisConnectionError, RedisTimeoutError) as e:
            raise self._connection_error("get", key, e) from e

        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageSerializationError("decode", key, original_error=e) from e

    @with_storage_retry()
    async def set(self, key: str, value: Any) -> None:
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageSerializationError("encode", key, original_error=e) from e

        client = await self.connect()
        try:
            await client.set(self._key(key), payload)
        except (RedisConnectionError, RedisTimeoutError) as e:
            raise self._connection_error("set", key, e) from e
        logger.debug(f"Stored {key} in redis ({len(payload)} bytes)")

    @with_storage_retry()
    async def delete(self, key: str) -> None:
        client = await self.connect()
        try:
            await client.delete(self._key(key))
        except (RedisConnectionError, RedisTimeoutError) as e:
            raise self._connection_error("delete", key, e) from e
