"""
Unicache — Test Configuration and Shared Fixtures

Provides pytest configuration and shared fixtures for unit and integration tests.
"""

import os
from collections.abc import AsyncGenerator, Generator
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from redis.asyncio import Redis

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "DEBUG"


@pytest.fixture
def test_redis_url() -> str:
    """Get Redis URL for testing (database 15 for isolation)."""
    return os.environ.get("TEST_REDIS_URL", "redis://localhost:6379/15")


@pytest_asyncio.fixture
async def redis_client(test_redis_url: str) -> AsyncGenerator[Redis, None]:
    """
    Create a Redis client for testing.

    Automatically skips tests if Redis is not available.
    Clears the test database before and after each test.
    """
    client: Redis = Redis.from_url(test_redis_url, decode_responses=True)

    try:
        await client.ping()
    except Exception as e:
        await client.aclose()
        pytest.skip(f"Redis not available for testing: {e}")

    await client.flushdb()

    yield client

    try:
        await client.flushdb()
    finally:
        await client.aclose()


@pytest.fixture
def fake_redis() -> SimpleNamespace:
    """
    Mocked redis-py client classes backed by one dict.

    `client_class` / `async_client_class` stand in for redis.Redis and
    redis.asyncio.Redis; every client they build shares `store`, so the
    distributed engine can be exercised end to end without a server.
    """
    store: dict[str, str] = {}
    ttls: dict[str, int | None] = {}

    def _set(name: str, value: str, px: int | None = None) -> bool:
        store[name] = value
        ttls[name] = px
        return True

    def _delete(name: str) -> int:
        ttls.pop(name, None)
        return 1 if store.pop(name, None) is not None else 0

    def _flushall() -> bool:
        store.clear()
        ttls.clear()
        return True

    client = MagicMock(name="Redis()")
    client.set.side_effect = _set
    client.get.side_effect = store.get
    client.exists.side_effect = lambda name: int(name in store)
    client.delete.side_effect = _delete
    client.flushall.side_effect = _flushall

    async_client = MagicMock(name="AsyncRedis()")
    async_client.set = AsyncMock(side_effect=_set)
    async_client.get = AsyncMock(side_effect=store.get)
    async_client.exists = AsyncMock(side_effect=lambda name: int(name in store))
    async_client.delete = AsyncMock(side_effect=_delete)
    async_client.flushall = AsyncMock(side_effect=_flushall)
    async_client.aclose = AsyncMock()

    client_class = MagicMock(name="Redis", return_value=client)
    client_class.from_url.return_value = client
    async_client_class = MagicMock(name="AsyncRedis", return_value=async_client)
    async_client_class.from_url.return_value = async_client

    return SimpleNamespace(
        store=store,
        ttls=ttls,
        client=client,
        async_client=async_client,
        client_class=client_class,
        async_client_class=async_client_class,
    )


@pytest.fixture
def sample_cache_data() -> dict[str, Any]:
    """Sample data for cache testing."""
    return {
        "simple_string": "hello",
        "simple_int": 42,
        "simple_float": 3.14,
        "simple_bool": True,
        "complex_dict": {
            "nested": {
                "key": "value",
                "number": 123,
                "list": [1, 2, 3],
            }
        },
        "complex_list": [
            {"id": 1, "name": "Alice"},
            {"id": 2, "name": "Bob"},
        ],
    }


@pytest.fixture(autouse=True)
def reset_cache_factory() -> Generator[None, None, None]:
    """Reset cache factory after each test to prevent state leakage."""
    yield
    from unicache.cache.factory import reset_cache_factory

    reset_cache_factory()
