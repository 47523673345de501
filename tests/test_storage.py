"""
Tests for the key-value storage adapters.
"""
import asyncio
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

import test_utils  # noqa: F401

from adapters.storage import FileStore, InMemoryStore, RedisStore, create_store
from core.exceptions import ConfigurationError, StorageConnectionError, StorageSerializationError
from core.error_handler import error_handler


class TestInMemoryStore:

    @pytest.mark.asyncio
    async def test_round_trip_returns_copies(self):
        store = InMemoryStore()
        value = [{'id': 'm1', 'events': []}]
        await store.set("soccerMatches", value)
        loaded = await store.get("soccerMatches")
        loaded[0]['id'] = 'changed'
        assert (await store.get("soccerMatches"))[0]['id'] == 'm1'

    @pytest.mark.asyncio
    async def test_missing_and_delete(self):
        store = InMemoryStore()
        assert await store.get("nothing") is None
        await store.set("k", 1)
        await store.delete("k")
        await store.delete("k")
        assert await store.get("k") is None

    @pytest.mark.asyncio
    async def test_rejects_non_json_values(self):
        with pytest.raises(StorageSerializationError):
            await InMemoryStore().set("k", {1, 2})


class TestFileStore:

    @pytest.mark.asyncio
    async def test_round_trip(self, tmp_path):
        store = FileStore(tmp_path)
        await store.set("soccerMatches", [{'id': 'm1'}])
        assert await store.get("soccerMatches") == [{'id': 'm1'}]
        assert (tmp_path / "soccerMatches.json").exists()
        assert not list(tmp_path.glob("*.tmp"))

    @pytest.mark.asyncio
    async def test_overwrite_replaces_whole_value(self, tmp_path):
        store = FileStore(tmp_path)
        await store.set("k", [1, 2, 3])
        await store.set("k", [4])
        assert await store.get("k") == [4]

    @pytest.mark.asyncio
    async def test_corrupt_file(self, tmp_path):
        store = FileStore(tmp_path)
        (tmp_path / "k.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(StorageSerializationError):
            await store.get("k")

    @pytest.mark.asyncio
    async def test_failed_encode_keeps_previous_value(self, tmp_path):
        store = FileStore(tmp_path)
        await store.set("k", {'a': 1})
        with pytest.raises(StorageSerializationError):
            await store.set("k", {'a': object()})
        assert await store.get("k") == {'a': 1}

    @pytest.mark.asyncio
    async def test_delete(self, tmp_path):
        store = FileStore(tmp_path)
        await store.set("k", 1)
        await store.delete("k")
        await store.delete("k")
        assert await store.get("k") is None

    @pytest.mark.asyncio
    async def test_concurrent_writes_to_one_key(self, tmp_path):
        store = FileStore(tmp_path)
        payloads = [[{'id': f"m{i}"}] for i in range(5)]
        results = await asyncio.gather(
            *(store.set("soccerMatches", payload) for payload in payloads),
            return_exceptions=True
        )
        assert results == [None] * 5
        assert await store.get("soccerMatches") in payloads
        assert not list(tmp_path.glob("*.tmp"))


class TestRedisStore:

    def setup_method(self):
        self.client = AsyncMock()
        self.store = RedisStore(client=self.client, key_prefix="touchline")
        error_handler.reset_stats()

    @pytest.mark.asyncio
    async def test_get_uses_prefixed_key(self):
        self.client.get.return_value = json.dumps([{'id': 'm1'}])
        assert await self.store.get("soccerMatches") == [{'id': 'm1'}]
        self.client.get.assert_awaited_once_with("touchline:soccerMatches")

    @pytest.mark.asyncio
    async def test_get_missing(self):
        self.client.get.return_value = None
        assert await self.store.get("soccerMatches") is None

    @pytest.mark.asyncio
    async def test_set_writes_single_json_value(self):
        await self.store.set("matchCategories", ["Cup"])
        self.client.set.assert_awaited_once_with("touchline:matchCategories", '["Cup"]')

    @pytest.mark.asyncio
    async def test_delete(self):
        await self.store.delete("soccerMatches")
        self.client.delete.assert_awaited_once_with("touchline:soccerMatches")

    @pytest.mark.asyncio
    async def test_connection_errors_retried_then_raised(self):
        self.client.get.side_effect = RedisConnectionError("down")
        with patch("core.error_handler.asyncio.sleep", new=AsyncMock()):
            with pytest.raises(StorageConnectionError):
                await self.store.get("soccerMatches")
        assert self.client.get.await_count == 4
        stats = error_handler.get_failure_stats()
        assert any(op.endswith(".get") for op in stats)

    @pytest.mark.asyncio
    async def test_recovers_after_transient_error(self):
        self.client.get.side_effect = [RedisConnectionError("blip"), json.dumps({'ok': True})]
        with patch("core.error_handler.asyncio.sleep", new=AsyncMock()):
            assert await self.store.get("k") == {'ok': True}

    @pytest.mark.asyncio
    async def test_close(self):
        await self.store.close()
        self.client.aclose.assert_awaited_once()
        assert self.store.redis_client is None


class TestCreateStore:

    def test_memory(self):
        assert isinstance(create_store(SimpleNamespace(storage_backend="memory")), InMemoryStore)

    def test_file(self, tmp_path):
        store = create_store(SimpleNamespace(storage_backend="file", data_dir=str(tmp_path)))
        assert isinstance(store, FileStore)
        assert store.data_dir == tmp_path

    def test_redis(self):
        store = create_store(SimpleNamespace(storage_backend="redis", redis_key_prefix="club"))
        assert isinstance(store, RedisStore)
        assert store.key_prefix == "club"

    def test_unknown_backend(self):
        with pytest.raises(ConfigurationError) as exc_info:
            create_store(SimpleNamespace(storage_backend="sqlite"))
        assert exc_info.value.error_code == "CONFIG_ERROR"
