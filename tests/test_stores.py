"""Tests for the memory and Redis stores and the store registry."""

from unittest.mock import AsyncMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from hookcache.exceptions import ConfigurationError, StoreUnavailable
from hookcache.stores import MemoryStore, RedisStore, StoreRegistry, build_store

from .conftest import make_settings


class ManualTimer:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestMemoryStore:
    @pytest.fixture
    def timer(self):
        return ManualTimer()

    @pytest.mark.asyncio
    async def test_set_get_delete(self):
        store = MemoryStore()
        await store.set("a", "1")

        assert await store.get("a") == "1"
        await store.delete("a")
        assert await store.get("a") is None

    @pytest.mark.asyncio
    async def test_multi_preserves_order_and_skips_none_keys(self):
        store = MemoryStore()
        await store.set("a", "1")
        await store.set("c", "3")

        assert await store.multi("c", None, "b", "a") == ["3", None, None, "1"]

    @pytest.mark.asyncio
    async def test_per_entry_ttl(self, timer):
        store = MemoryStore(max_age=100, timer=timer)
        await store.set("short", "1", ttl=5)
        await store.set("long", "2")

        timer.now = 4
        assert await store.get("short") == "1"
        timer.now = 6
        assert await store.get("short") is None
        assert await store.get("long") == "2"
        timer.now = 101
        assert await store.get("long") is None

    @pytest.mark.asyncio
    async def test_size_bound(self):
        store = MemoryStore(max_entries=2)
        for key in ("a", "b", "c"):
            await store.set(key, key)

        assert len(store) == 2
        assert await store.get("c") == "c"

    @pytest.mark.asyncio
    async def test_clear(self):
        store = MemoryStore()
        await store.set("a", "1")
        await store.clear()

        assert await store.get("a") is None


class TestRedisStore:
    @pytest.fixture
    def client(self):
        return AsyncMock()

    @pytest.fixture
    def store(self, client):
        return RedisStore(client, prefix="test:", default_ttl=600)

    @pytest.mark.asyncio
    async def test_multi_uses_single_mget(self, store, client):
        client.mget.return_value = ["w", None]

        result = await store.multi("test:users", None, "test:q")

        assert result == ["w", None, None]
        client.mget.assert_awaited_once_with(["test:users", "test:q"])

    @pytest.mark.asyncio
    async def test_multi_with_only_none_keys_skips_redis(self, store, client):
        assert await store.multi(None, None) == [None, None]
        client.mget.assert_not_called()

    @pytest.mark.asyncio
    async def test_set_passes_ttl(self, store, client):
        await store.set("test:q", "v", ttl=30)
        await store.set("test:w", "v")

        assert client.set.await_args_list[0].kwargs == {"ex": 30}
        assert client.set.await_args_list[1].kwargs == {"ex": 600}

    @pytest.mark.asyncio
    async def test_redis_errors_become_store_unavailable(self, store, client):
        client.get.side_effect = RedisConnectionError("refused")
        client.mget.side_effect = RedisConnectionError("refused")
        client.set.side_effect = RedisConnectionError("refused")

        with pytest.raises(StoreUnavailable):
            await store.get("test:q")
        with pytest.raises(StoreUnavailable):
            await store.multi("test:q")
        with pytest.raises(StoreUnavailable):
            await store.set("test:q", "v")

    @pytest.mark.asyncio
    async def test_clear_scans_prefix(self, store, client):
        client.scan.side_effect = [(7, ["test:a", "test:b"]), (0, ["test:c"])]

        await store.clear()

        assert client.scan.await_args_list[0].kwargs["match"] == "test:*"
        assert client.delete.await_count == 2
        client.delete.assert_any_await("test:a", "test:b")
        client.delete.assert_any_await("test:c")


class TestRegistry:
    def test_lookup(self):
        registry = StoreRegistry()
        store = MemoryStore()
        registry.register("cache", store)

        assert registry.get("cache") is store
        assert "cache" in registry

    def test_unknown_store_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            StoreRegistry().get("cache")

    @pytest.mark.asyncio
    async def test_build_memory_store(self):
        store = await build_store(make_settings(store_max_entries=10, store_max_age=30))

        assert isinstance(store, MemoryStore)
        assert store.max_entries == 10
        assert store.max_age == 30

    @pytest.mark.asyncio
    async def test_build_redis_store(self):
        client = AsyncMock()
        settings = make_settings(store_backend="redis", redis_url="redis://localhost:6379/0")

        with patch("hookcache.config.redis.init_redis", new=AsyncMock(return_value=client)) as init:
            store = await build_store(settings)

        init.assert_awaited_once_with("redis://localhost:6379/0")
        assert isinstance(store, RedisStore)
        assert store.client is client
        assert store.prefix == "test:"
