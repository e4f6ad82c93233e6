"""
Unicache — Distributed Store Engine

Redis engine over text payloads with:
- Blocking calls through redis.Redis, awaitable calls through redis.asyncio.Redis
- A connection handle built on first use and replaced whenever the
  connection string changes
- Per-key TTL with millisecond precision (SET ... PX)
- clear() flushing every endpoint named in the connection string

Requires: redis>=5.0.1

Example:
    engine = DistributedStoreEngine()
    engine.set_connection("localhost:6379,allowAdmin=true")
    engine.add("greeting", "hello", ttl=timedelta(minutes=5))
    val = await engine.get_async("greeting")
"""

from __future__ import annotations

import logging
import threading
from datetime import timedelta
from typing import Any

from ...config.connection import ConnectionSettings, RedisEndpoint, parse_connection_string
from ...config.schemas import CacheBackend
from ...errors import NoConnectionConfiguredError
from ..interface import CacheEngine

logger = logging.getLogger(__name__)

try:
    from redis import Redis
    from redis.asyncio import Redis as AsyncRedis
except ImportError as e:  # pragma: no cover
    raise ImportError(
        "Redis client is required but not installed. "
        "Install with: pip install 'redis>=5.0.1' or add 'redis' to your dependencies."
    ) from e


def _ttl_milliseconds(ttl: timedelta | None) -> int | None:
    """
    Normalize TTL for SET PX:
    - None -> no expiry
    - positive -> whole milliseconds, at least 1
    """
    if ttl is None:
        return None
    if ttl < timedelta(0):
        raise ValueError("ttl must not be negative")
    return max(1, ttl // timedelta(milliseconds=1))


class RedisConnection:
    """
    Lazily built clients for one connection string.

    Neither client exists until first use, and redis-py itself only opens
    sockets on the first command. A handle stays valid after the engine
    moves to a new connection string, so in-flight calls finish on it.
    """

    def __init__(
        self,
        settings: ConnectionSettings,
        client_class: Any = Redis,
        async_client_class: Any = AsyncRedis,
    ) -> None:
        self.settings = settings
        self._client_class = client_class
        self._async_client_class = async_client_class
        self._client: Any = None
        self._async_client: Any = None
        self._lock = threading.Lock()

    def _build(self, client_class: Any, endpoint: RedisEndpoint | None = None) -> Any:
        kwargs = self.settings.client_kwargs(endpoint)
        if self.settings.url is not None:
            return client_class.from_url(self.settings.url, **kwargs)
        return client_class(**kwargs)

    @property
    def client(self) -> Redis:
        """Blocking client for the primary endpoint."""
        with self._lock:
            if self._client is None:
                logger.debug("Building redis client for %s", self.settings.describe())
                self._client = self._build(self._client_class)
            return self._client

    @property
    def async_client(self) -> AsyncRedis:
        """Awaitable client for the primary endpoint."""
        with self._lock:
            if self._async_client is None:
                logger.debug("Building async redis client for %s", self.settings.describe())
                self._async_client = self._build(self._async_client_class)
            return self._async_client

    @property
    def is_open(self) -> bool:
        """Whether either client has been built and not closed yet."""
        return self._client is not None or self._async_client is not None

    def secondary_endpoints(self) -> tuple[RedisEndpoint, ...]:
        """Endpoints other than the primary (only endpoint-list strings have them)."""
        return self.settings.endpoints[1:]

    def flush_all(self) -> None:
        """FLUSHALL on every endpoint."""
        self.client.flushall()
        for endpoint in self.secondary_endpoints():
            client = self._build(self._client_class, endpoint)
            try:
                client.flushall()
            finally:
                client.close()

    async def flush_all_async(self) -> None:
        await self.async_client.flushall()
        for endpoint in self.secondary_endpoints():
            client = self._build(self._async_client_class, endpoint)
            try:
                await client.flushall()
            finally:
                await client.aclose()

    def close(self) -> None:
        """Close the blocking client, if built."""
        with self._lock:
            client, self._client = self._client, None
        if client is not None:
            client.close()

    async def aclose(self) -> None:
        """Close both clients, if built."""
        with self._lock:
            async_client, self._async_client = self._async_client, None
        self.close()
        if async_client is not None:
            await async_client.aclose()


class DistributedStoreEngine(CacheEngine):
    """
    Redis engine storing text under raw keys.

    Notes:
    - Values must already be text; the facade serializes before calling in.
    - Every call before set_connection() raises NoConnectionConfiguredError.
    - Redis errors (connection refused, timeouts, ...) propagate unchanged.
    - clear() is FLUSHALL: it wipes every database on every endpoint.
    """

    backend = CacheBackend.REDIS

    def __init__(
        self,
        connection_string: str | None = None,
        client_class: Any = Redis,
        async_client_class: Any = AsyncRedis,
    ) -> None:
        """
        Initialize the distributed engine.

        Args:
            connection_string: Optional initial connection string
            client_class: Blocking client type (redis.Redis)
            async_client_class: Awaitable client type (redis.asyncio.Redis)
        """
        self._client_class = client_class
        self._async_client_class = async_client_class
        self._connection_string: str | None = None
        self._settings: ConnectionSettings | None = None
        self._handle: RedisConnection | None = None
        # Handles replaced by set_connection, closed with the engine
        self._retired: list[RedisConnection] = []
        self._lock = threading.Lock()

        if connection_string:
            self.set_connection(connection_string)

    # ------------ Connection ------------

    @property
    def connection_string(self) -> str | None:
        return self._connection_string

    def set_connection(self, connection_string: str | None) -> None:
        """
        Record a connection string and retire the current handle.

        The next operation builds a fresh handle. The retired one stays open
        for callers still using it and is closed by close() / aclose().
        None or an empty string unsets the connection.

        Raises:
            ConfigurationError: If the string is malformed
        """
        normalized = (connection_string or "").strip()
        settings = parse_connection_string(normalized) if normalized else None

        with self._lock:
            self._connection_string = normalized or None
            self._settings = settings
            if self._handle is not None and self._handle.is_open:
                self._retired.append(self._handle)
            self._handle = None

        if settings is None:
            logger.info("Redis connection unset, calls route to the local cache")
        else:
            logger.info(
                "Redis connection set to %s",
                settings.describe(),
                extra={"endpoints": settings.describe(), "allow_admin": settings.allow_admin},
            )

    def has_connection_string(self) -> bool:
        return bool(self._connection_string)

    def connection(self, operation: str = "connect") -> RedisConnection:
        """
        Current connection handle, built on first use.

        Raises:
            NoConnectionConfiguredError: If no connection string is set
        """
        with self._lock:
            if self._settings is None:
                raise NoConnectionConfiguredError(operation)
            if self._handle is None:
                self._handle = RedisConnection(
                    self._settings,
                    client_class=self._client_class,
                    async_client_class=self._async_client_class,
                )
            return self._handle

    # ------------ Blocking operations ------------

    def add(self, key: str, value: str, ttl: timedelta | None = None) -> None:
        """Set key to hold value, overwriting whatever it held before."""
        client = self.connection("add").client
        client.set(key, value, px=_ttl_milliseconds(ttl))

    def get(self, key: str) -> str | None:
        return self.connection("get").client.get(key)

    def exists(self, key: str) -> bool:
        return bool(self.connection("exists").client.exists(key))

    def remove(self, key: str) -> bool:
        return bool(self.connection("remove").client.delete(key))

    def clear(self) -> None:
        handle = self.connection("clear")
        handle.flush_all()
        logger.info("Flushed all redis data on %s", handle.settings.describe())

    def _handles(self) -> list[RedisConnection]:
        with self._lock:
            handles = list(self._retired)
            if self._handle is not None:
                handles.append(self._handle)
        return handles

    def close(self) -> None:
        """Close the blocking clients of the current and retired handles."""
        for handle in self._handles():
            handle.close()

    # ------------ Awaitable operations ------------

    async def add_async(self, key: str, value: str, ttl: timedelta | None = None) -> None:
        client = self.connection("add").async_client
        await client.set(key, value, px=_ttl_milliseconds(ttl))

    async def get_async(self, key: str) -> str | None:
        return await self.connection("get").async_client.get(key)

    async def exists_async(self, key: str) -> bool:
        return bool(await self.connection("exists").async_client.exists(key))

    async def remove_async(self, key: str) -> bool:
        return bool(await self.connection("remove").async_client.delete(key))

    async def clear_async(self) -> None:
        handle = self.connection("clear")
        await handle.flush_all_async()
        logger.info("Flushed all redis data on %s", handle.settings.describe())

    async def aclose(self) -> None:
        """Close every client of the current and retired handles."""
        handles = self._handles()
        for handle in handles:
            await handle.aclose()
        with self._lock:
            self._retired = [h for h in self._retired if h not in handles]
