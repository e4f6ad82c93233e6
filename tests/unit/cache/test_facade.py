"""
Unicache — Cache Facade Tests

Routing between the local store and a mocked Redis, value normalization,
typed reads, expiration and the sync/async pairs.
"""

import asyncio
import math
import time
from datetime import timedelta
from enum import StrEnum
from types import SimpleNamespace
from typing import Any

import pytest
from pydantic import BaseModel

from unicache.cache.backends.memory import LocalStoreEngine
from unicache.cache.backends.redis import DistributedStoreEngine
from unicache.cache.context import CacheContext
from unicache.cache.facade import Cache
from unicache.cache.policy import ExpirationPolicy
from unicache.config import CacheBackend
from unicache.errors import InvalidKeyError, SerializationError


class Color(StrEnum):
    RED = "red"


class Order(BaseModel):
    id: int
    items: list[str]
    total: float


@pytest.fixture
def context(fake_redis: SimpleNamespace) -> CacheContext:
    return CacheContext(
        local=LocalStoreEngine(max_entries=100),
        distributed=DistributedStoreEngine(
            client_class=fake_redis.client_class,
            async_client_class=fake_redis.async_client_class,
        ),
    )


@pytest.fixture
def cache(context: CacheContext) -> Cache:
    return Cache(context)


class TestKeyValidation:
    @pytest.mark.parametrize("key", [None, "", 42])
    @pytest.mark.parametrize(
        "call",
        [
            lambda c, k: c.add(k, "v"),
            lambda c, k: c.get(k),
            lambda c, k: c.exists(k),
            lambda c, k: c.remove(k),
            lambda c, k: c.update(k, "v"),
        ],
    )
    def test_invalid_keys_rejected(self, cache: Cache, key: Any, call: Any) -> None:
        with pytest.raises(InvalidKeyError):
            call(cache, key)

    async def test_invalid_keys_rejected_async(self, cache: Cache) -> None:
        with pytest.raises(InvalidKeyError):
            await cache.add_async("", "v")
        with pytest.raises(InvalidKeyError):
            await cache.get_async(None)  # type: ignore[arg-type]

    def test_invalid_key_checked_before_routing(self, cache: Cache, fake_redis: SimpleNamespace) -> None:
        cache.set_connection("validhost:6379")

        with pytest.raises(InvalidKeyError):
            cache.add("", "v")
        fake_redis.client_class.assert_not_called()


class TestLocalRouting:
    def test_empty_connection_routes_local(self, cache: Cache, context: CacheContext) -> None:
        cache.set_connection("")
        cache.add("item", "cachedItem")

        assert cache.backend is CacheBackend.MEMORY
        assert cache.get("item") == "cachedItem"
        assert context.local.exists("item") is True

    def test_exists_before_and_after_add(self, cache: Cache) -> None:
        assert cache.exists("item") is False
        cache.add("item", "cachedItem")
        assert cache.exists("item") is True

    def test_remove_true_exactly_once(self, cache: Cache) -> None:
        cache.add("item", "cachedItem")

        assert cache.remove("item") is True
        assert cache.remove("item") is False
        assert cache.exists("item") is False

    def test_values_stored_as_text(self, cache: Cache, context: CacheContext) -> None:
        cache.add("count", 42)
        cache.add("flag", True)
        cache.add("order", Order(id=1, items=["a"], total=9.5))

        assert context.local.get("count") == "42"
        assert context.local.get("flag") == "true"
        assert context.local.get("order") == '{"id":1,"items":["a"],"total":9.5}'

    def test_typed_round_trip(self, cache: Cache, sample_cache_data: dict[str, Any]) -> None:
        for key, value in sample_cache_data.items():
            cache.add(key, value)

        for key, value in sample_cache_data.items():
            assert cache.get(key, type(value)) == value

    def test_non_finite_float_round_trip(self, cache: Cache) -> None:
        cache.add("inf", math.inf)
        cache.add("nan", math.nan)

        assert cache.get("inf") == "inf"
        assert cache.get("inf", float) == math.inf
        assert math.isnan(cache.get("nan", float))

    def test_str_enum_read_back_as_plain_text(self, cache: Cache) -> None:
        cache.add("color", Color.RED)

        value = cache.get("color")
        assert value == "red"
        assert type(value) is str
        assert cache.get("color", Color) is Color.RED

    def test_raw_get_of_native_engine_value(self, cache: Cache, context: CacheContext) -> None:
        context.local.add("n", 5)
        context.local.add("order", {"id": 1})

        assert cache.get("n") == "5"
        assert cache.get("n", int) == 5
        assert cache.get("order") == '{"id":1}'

    def test_get_model(self, cache: Cache) -> None:
        order = Order(id=7, items=["x", "y"], total=12.25)
        cache.add("order:7", order)

        assert cache.get("order:7", Order) == order

    def test_typed_get_missing_key_is_none(self, cache: Cache) -> None:
        assert cache.get("missing-key", Order) is None

    def test_typed_get_wrong_shape_raises(self, cache: Cache) -> None:
        cache.add("order", {"id": "not-a-number"})

        with pytest.raises(SerializationError):
            cache.get("order", Order)

    def test_add_expires(self, cache: Cache) -> None:
        cache.add("k", {"v": 1}, minutes=0.0001)
        time.sleep(0.05)

        assert cache.exists("k") is False

    def test_default_minutes_applied(self, context: CacheContext) -> None:
        cache = Cache(context, default_minutes=0.0001)
        cache.add("k", "v")
        time.sleep(0.05)

        assert cache.exists("k") is False

    def test_zero_minutes_never_expires(self, cache: Cache, context: CacheContext) -> None:
        cache.add("k", "v", minutes=0)
        entry = context.local._store["k"]

        assert entry.policy.expires is False

    def test_negative_minutes_rejected(self, cache: Cache) -> None:
        with pytest.raises(ValueError):
            cache.add("k", "v", minutes=-1)

    def test_custom_policy(self, cache: Cache, context: CacheContext) -> None:
        policy = ExpirationPolicy.sliding(timedelta(minutes=5))
        cache.add("session", {"user": 1}, policy=policy)

        assert context.local._store["session"].policy == policy
        assert cache.get("session", dict) == {"user": 1}

    def test_policy_and_minutes_together_rejected(self, cache: Cache) -> None:
        with pytest.raises(ValueError):
            cache.add("k", "v", minutes=1, policy=ExpirationPolicy())

    def test_update_overwrites_value(self, cache: Cache) -> None:
        cache.add("item", "v1", minutes=5)
        cache.update("item", "v2")

        assert cache.get("item") == "v2"

    def test_clear(self, cache: Cache) -> None:
        for i in range(5):
            cache.add(f"key{i}", i)

        cache.clear()

        for i in range(5):
            assert cache.exists(f"key{i}") is False


class TestDistributedRouting:
    @pytest.fixture(autouse=True)
    def connect(self, cache: Cache) -> None:
        cache.set_connection("validhost:6379")

    def test_add_remove_exists(self, cache: Cache, fake_redis: SimpleNamespace) -> None:
        cache.add("item", "cachedItem")

        assert cache.backend is CacheBackend.REDIS
        assert fake_redis.store == {"item": "cachedItem"}
        assert cache.remove("item") is True
        assert cache.exists("item") is False

    def test_minutes_become_ttl(self, cache: Cache, fake_redis: SimpleNamespace) -> None:
        cache.add("a", "v")
        cache.add("b", "v", minutes=2)
        cache.add("c", "v", minutes=0)

        assert fake_redis.ttls == {"a": 60_000, "b": 120_000, "c": None}

    def test_structured_values_are_json(self, cache: Cache, fake_redis: SimpleNamespace) -> None:
        cache.add("order", Order(id=1, items=[], total=0.0))

        assert fake_redis.store["order"] == '{"id":1,"items":[],"total":0.0}'
        assert cache.get("order", Order) == Order(id=1, items=[], total=0.0)

    def test_str_enum_stored_as_plain_text(self, cache: Cache, fake_redis: SimpleNamespace) -> None:
        cache.add("color", Color.RED)

        assert type(fake_redis.store["color"]) is str
        assert cache.get("color") == "red"
        assert cache.get("color", Color) is Color.RED

    def test_non_finite_float_round_trip(self, cache: Cache) -> None:
        cache.add("inf", -math.inf)
        assert cache.get("inf", float) == -math.inf

    def test_typed_get_missing_key_is_none(self, cache: Cache) -> None:
        assert cache.get("missing-key", Order) is None

    def test_policy_form_always_local(self, cache: Cache, context: CacheContext, fake_redis: SimpleNamespace) -> None:
        cache.add("session", "data", policy=ExpirationPolicy())

        assert fake_redis.store == {}
        assert context.local.get("session") == "data"

    def test_clear_only_touches_redis(self, cache: Cache, context: CacheContext, fake_redis: SimpleNamespace) -> None:
        context.local.add("local-only", "v")
        cache.add("item", "v")

        cache.clear()

        assert fake_redis.store == {}
        assert context.local.exists("local-only") is True


class TestBackendSwitching:
    def test_routing_follows_connection_per_call(self, cache: Cache, fake_redis: SimpleNamespace) -> None:
        cache.add("local", "L")

        cache.set_connection("validhost:6379")
        cache.add("remote", "R")
        assert cache.exists("local") is False
        assert cache.get("remote") == "R"

        cache.set_connection(None)
        assert cache.exists("remote") is False
        assert cache.get("local") == "L"
        assert fake_redis.store == {"remote": "R"}

    def test_has_connection(self, cache: Cache) -> None:
        assert cache.has_connection() is False
        cache.set_connection("validhost:6379")
        assert cache.has_connection() is True


class TestAsyncApi:
    async def test_local_round_trip(self, cache: Cache) -> None:
        await cache.add_async("item", {"a": 1})

        assert await cache.exists_async("item") is True
        assert await cache.get_async("item") == '{"a":1}'
        assert await cache.get_async("item", dict) == {"a": 1}
        assert await cache.remove_async("item") is True
        assert await cache.remove_async("item") is False

    async def test_local_policy_form(self, cache: Cache, context: CacheContext) -> None:
        await cache.add_async("s", "v", policy=ExpirationPolicy.sliding(timedelta(seconds=30)))
        assert context.local.get("s") == "v"

    async def test_local_clear(self, cache: Cache) -> None:
        await cache.add_async("a", 1)
        await cache.clear_async()
        assert await cache.exists_async("a") is False

    async def test_concurrent_local_adds(self, cache: Cache, context: CacheContext) -> None:
        await asyncio.gather(*(cache.add_async(f"key{i}", i) for i in range(50)))
        assert len(context.local) == 50

    async def test_distributed_round_trip(self, cache: Cache, fake_redis: SimpleNamespace) -> None:
        cache.set_connection("validhost:6379")

        await cache.add_async("order", Order(id=2, items=["z"], total=1.0), minutes=5)

        assert fake_redis.ttls == {"order": 300_000}
        assert await cache.get_async("order", Order) == Order(id=2, items=["z"], total=1.0)
        assert await cache.exists_async("order") is True
        assert await cache.remove_async("order") is True
        fake_redis.client.set.assert_not_called()

    async def test_distributed_clear(self, cache: Cache, fake_redis: SimpleNamespace) -> None:
        cache.set_connection("validhost:6379")
        await cache.add_async("a", "1")

        await cache.clear_async()

        assert fake_redis.store == {}

    async def test_aclose(self, cache: Cache, fake_redis: SimpleNamespace) -> None:
        cache.set_connection("validhost:6379")
        await cache.get_async("a")

        await cache.aclose()

        fake_redis.async_client.aclose.assert_awaited_once()
