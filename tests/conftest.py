"""Shared fixtures for cache hook tests."""

from typing import List, Optional, Tuple

import pytest

from hookcache.cache import CacheHook, Operation, Phase, RequestContext
from hookcache.config.settings import CacheSettings
from hookcache.stores import MemoryStore, StoreRegistry


class FakeClock:
    """Millisecond clock the tests move by hand."""

    def __init__(self, start: int = 1_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int = 1) -> int:
        self.now += ms
        return self.now


class RecordingStore(MemoryStore):
    """Memory store that remembers every write."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.writes: List[Tuple[str, str, Optional[int]]] = []
        self.batches: List[Tuple[Optional[str], ...]] = []

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        self.writes.append((key, value, ttl))
        await super().set(key, value, ttl)

    async def multi(self, *keys: Optional[str]):
        self.batches.append(keys)
        return await super().multi(*keys)

    def written_keys(self) -> List[str]:
        return [key for key, _value, _ttl in self.writes]


def make_settings(**overrides) -> CacheSettings:
    options = {"store_name": "cache", "key_prefix": "test:"}
    options.update(overrides)
    return CacheSettings(_env_file=None, **options)


def make_context(operation: Operation, phase: Phase = Phase.PRE, **fields) -> RequestContext:
    fields.setdefault("resource_path", "users")
    fields.setdefault("service_name", "users")
    return RequestContext(phase=phase, operation=operation, **fields)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return RecordingStore()


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def registry(store):
    registry = StoreRegistry()
    registry.register("cache", store)
    return registry


@pytest.fixture
def hook(settings, registry, clock):
    return CacheHook(settings, registry, clock=clock)
